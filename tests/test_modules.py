"""Tests for the per-event feature modules: schedule, announcements, teams, voting, leaderboard, check-in."""
import pytest
from werkzeug.security import generate_password_hash

from app.campusflow import auth, create_app
from app.campusflow.db import session_scope
from app.campusflow.events.models import Event
from app.campusflow.models import Base, ParticipationLog, User
from app.campusflow.modules.voting.models import Vote


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    auth._login_attempts.clear()

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        org = User(email="org@campus.edu", password_hash=generate_password_hash("pw12"), name="Org", role="organizer")
        s.add(org)
        for name in ("ana", "dev", "sara"):
            s.add(
                User(
                    email=f"{name}@campus.edu",
                    password_hash=generate_password_hash("pw12"),
                    name=name.title(),
                    role="student",
                )
            )
        s.flush()
        s.add(
            Event(
                title="HackCampus",
                slug="hackcampus",
                event_type="hackathon",
                status="published",
                organizer_id=org.id,
                max_participants=50,
                enabled_modules=["registration", "schedule", "announcements", "teams", "voting", "leaderboard", "checkin"],
                module_configs={"teams": {"max_team_size": 2}, "checkin": {"points": 25}},
            )
        )
        s.add(
            Event(
                title="Plain Talk",
                slug="plain-talk",
                event_type="seminar",
                status="published",
                organizer_id=org.id,
                enabled_modules=["registration"],
            )
        )
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def _as(client, email):
    client.post("/api/auth/logout")
    r = client.post("/api/auth/login", json={"email": email, "password": "pw12"})
    assert r.status_code == 200
    return r.json["user"]


def _modules(client, slug="hackcampus"):
    return client.get(f"/api/events/{slug}").json["modules"]


def test_schedule_items_ordered(client):
    _as(client, "org@campus.edu")
    r = client.post(
        "/api/events/hackcampus/schedule",
        json={"title": "Closing", "start_time": "2026-03-16T20:00:00", "sort_order": 2},
    )
    assert r.status_code == 201
    client.post(
        "/api/events/hackcampus/schedule",
        json={"title": "Opening", "start_time": "2026-03-15T09:00:00", "sort_order": 1, "speaker": "Dean"},
    )

    items = _modules(client)["schedule"]
    assert [i["title"] for i in items] == ["Opening", "Closing"]
    assert items[0]["speaker"] == "Dean"


def test_schedule_requires_title_and_start(client):
    _as(client, "org@campus.edu")
    r = client.post("/api/events/hackcampus/schedule", json={"title": "No time"})
    assert r.status_code == 400


def test_schedule_requires_manager(client):
    _as(client, "ana@campus.edu")
    r = client.post("/api/events/hackcampus/schedule", json={"title": "X", "start_time": "2026-03-15T09:00:00"})
    assert r.status_code == 403


def test_announcements_newest_first(client):
    _as(client, "org@campus.edu")
    assert client.post("/api/events/hackcampus/announcements", json={"title": "First", "body": "one"}).status_code == 201
    r = client.post(
        "/api/events/hackcampus/announcements",
        json={"title": "Second", "body": "two", "priority": "high"},
    )
    assert r.json["priority"] == "high"

    items = _modules(client)["announcements"]
    assert [a["title"] for a in items] == ["Second", "First"]

    r = client.post("/api/events/hackcampus/announcements", json={"title": "No body"})
    assert r.status_code == 400


def test_teams_create_join_and_capacity(client):
    _as(client, "ana@campus.edu")
    r = client.post("/api/events/hackcampus/teams", json={"name": "Byte Me"})
    assert r.status_code == 201
    team = r.json
    assert team["leader_name"] == "Ana"
    assert team["member_count"] == 1
    assert team["max_size"] == 2

    assert client.post("/api/events/hackcampus/teams", json={"name": "Second"}).status_code == 409

    _as(client, "dev@campus.edu")
    r = client.post(f"/api/events/hackcampus/teams/{team['id']}/join")
    assert r.status_code == 200
    assert r.json["member_count"] == 2

    _as(client, "sara@campus.edu")
    r = client.post(f"/api/events/hackcampus/teams/{team['id']}/join")
    assert r.status_code == 400
    assert r.json["error"] == "Team is full"

    teams = _modules(client)["teams"]
    assert [(t["name"], t["member_count"]) for t in teams] == [("Byte Me", 2)]


def test_team_links_registration(client):
    _as(client, "ana@campus.edu")
    client.post("/api/events/hackcampus/register")
    team = client.post("/api/events/hackcampus/teams", json={"name": "Linked"}).json
    me = client.get("/api/auth/me").json
    regs = client.get(f"/api/users/{me['id']}/registrations").json
    assert regs[0]["team_id"] == team["id"]


def test_module_writes_need_module_enabled(client):
    _as(client, "ana@campus.edu")
    r = client.post("/api/events/plain-talk/teams", json={"name": "Nope"})
    assert r.status_code == 400
    assert "not enabled" in r.json["error"]


def test_leaderboard_sorted_by_score(client):
    _as(client, "ana@campus.edu")
    a = client.post("/api/events/hackcampus/teams", json={"name": "Alpha"}).json
    _as(client, "dev@campus.edu")
    b = client.post("/api/events/hackcampus/teams", json={"name": "Bravo"}).json

    _as(client, "dev@campus.edu")
    assert client.post(f"/api/events/hackcampus/teams/{b['id']}/score", json={"score": 10}).status_code == 403

    _as(client, "org@campus.edu")
    assert client.post(f"/api/events/hackcampus/teams/{a['id']}/score", json={"score": 40}).json["score"] == 40
    client.post(f"/api/events/hackcampus/teams/{b['id']}/score", json={"score": 90})
    assert client.post(f"/api/events/hackcampus/teams/{b['id']}/score", json={}).status_code == 400

    board = _modules(client)["leaderboard"]
    assert [(t["name"], t["score"], t["rank"]) for t in board] == [("Bravo", 90, 1), ("Alpha", 40, 2)]


def test_polls_and_tally(app, client):
    _as(client, "org@campus.edu")
    r = client.post("/api/events/hackcampus/polls", json={"question": "Best track?", "options": ["A"]})
    assert r.status_code == 400

    poll = client.post("/api/events/hackcampus/polls", json={"question": "Best track?", "options": ["A", "B"]}).json
    assert poll["vote_counts"] == []

    for email in ("ana@campus.edu", "dev@campus.edu", "sara@campus.edu"):
        _as(client, email)
        r = client.post(f"/api/events/hackcampus/polls/{poll['id']}/vote", json={"option_index": 0})
        assert r.status_code == 201

    r = client.post(f"/api/events/hackcampus/polls/{poll['id']}/vote", json={"option_index": 1})
    assert r.status_code == 409
    r = client.post(f"/api/events/hackcampus/polls/{poll['id']}/vote", json={"option_index": 5})
    assert r.status_code == 400

    polls = _modules(client)["voting"]
    assert polls[0]["options"] == ["A", "B"]
    assert polls[0]["vote_counts"] == [{"option_index": 0, "count": 3}]

    with session_scope(app) as s:
        assert s.query(Vote).count() == 3


def test_poll_is_active_must_be_boolean(client):
    _as(client, "org@campus.edu")
    body = {"question": "Pizza?", "options": ["Yes", "No"]}
    r = client.post("/api/events/hackcampus/polls", json=dict(body, is_active="false"))
    assert r.status_code == 400
    assert r.json["error"] == "is_active must be true or false"

    r = client.post("/api/events/hackcampus/polls", json=dict(body, is_active=False))
    assert r.status_code == 201
    poll = r.json
    assert poll["is_active"] is False

    _as(client, "ana@campus.edu")
    r = client.post(f"/api/events/hackcampus/polls/{poll['id']}/vote", json={"option_index": 0})
    assert r.status_code == 400
    assert r.json["error"] == "Poll is closed"


def test_checkin_marks_attended_and_logs_participation(app, client):
    ana = _as(client, "ana@campus.edu")
    client.post("/api/events/hackcampus/register")

    _as(client, "org@campus.edu")
    r = client.post("/api/events/hackcampus/checkin", json={"user_id": ana["id"]})
    assert r.status_code == 200
    assert r.json["status"] == "attended"
    assert r.json["checked_in_at"] is not None

    # second check-in changes nothing
    assert client.post("/api/events/hackcampus/checkin", json={"user_id": ana["id"]}).status_code == 200

    with session_scope(app) as s:
        logs = s.query(ParticipationLog).filter(ParticipationLog.user_id == ana["id"]).all()
        assert [(p.points_earned, p.event_type) for p in logs] == [(25, "hackathon")]
        assert s.get(User, ana["id"]).engagement_score == 25

    _as(client, "ana@campus.edu")
    history = client.get(f"/api/users/{ana['id']}/participation").json
    assert history[0]["event_title"] == "HackCampus"
    assert history[0]["points_earned"] == 25


def test_checkin_unregistered_user(client):
    dev = _as(client, "dev@campus.edu")
    _as(client, "org@campus.edu")
    r = client.post("/api/events/hackcampus/checkin", json={"user_id": dev["id"]})
    assert r.status_code == 404
    assert client.post("/api/events/hackcampus/checkin", json={}).status_code == 400
