"""Tests for the registration state machine over HTTP."""
import pytest
from werkzeug.security import generate_password_hash

from app.campusflow import auth, create_app
from app.campusflow.db import session_scope
from app.campusflow.events.models import Event
from app.campusflow.models import Base, User
from app.campusflow.modules.registration.models import Registration


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
        for i in range(1, 4):
            s.add(
                User(
                    email=f"s{i}@campus.edu",
                    password_hash=generate_password_hash("pw12"),
                    name=f"Student {i}",
                    role="student",
                    department="CSE",
                )
            )
        s.flush()
        s.add(
            Event(
                title="Small Workshop",
                slug="small-workshop",
                event_type="workshop",
                status="published",
                organizer_id=org.id,
                max_participants=2,
                enabled_modules=["registration"],
                module_configs={},
            )
        )
        s.add(
            Event(
                title="Waitlisted Fest",
                slug="waitlisted-fest",
                event_type="fest",
                status="published",
                organizer_id=org.id,
                max_participants=1,
                enabled_modules=["registration"],
                module_configs={"registration": {"waitlist_enabled": True}},
            )
        )
        s.add(
            Event(
                title="Draft Only",
                slug="draft-only",
                status="draft",
                organizer_id=org.id,
                max_participants=10,
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


def _rows(app, slug):
    with session_scope(app) as s:
        return (
            s.query(Registration.user_id, Registration.status)
            .join(Event, Event.id == Registration.event_id)
            .filter(Event.slug == slug)
            .order_by(Registration.id)
            .all()
        )


def test_register_requires_login(client):
    assert client.post("/api/events/small-workshop/register").status_code == 401


def test_register_and_register_again(app, client):
    _as(client, "s1@campus.edu")
    r = client.post("/api/events/small-workshop/register")
    assert r.status_code == 201
    assert r.json["status"] == "registered"

    r = client.post("/api/events/small-workshop/register")
    assert r.status_code == 409
    assert r.json["error"] == "Already registered"
    assert r.json["registration"]["status"] == "registered"
    assert len(_rows(app, "small-workshop")) == 1


def test_draft_event_not_open(client):
    _as(client, "s1@campus.edu")
    r = client.post("/api/events/draft-only/register")
    assert r.status_code == 400
    assert "not accepting" in r.json["error"]


def test_full_event_without_waitlist(client):
    for email in ("s1@campus.edu", "s2@campus.edu"):
        _as(client, email)
        assert client.post("/api/events/small-workshop/register").status_code == 201

    _as(client, "s3@campus.edu")
    r = client.post("/api/events/small-workshop/register")
    assert r.status_code == 400
    assert r.json["error"] == "Event is full"


def test_full_event_with_waitlist(app, client):
    _as(client, "s1@campus.edu")
    assert client.post("/api/events/waitlisted-fest/register").json["status"] == "registered"

    _as(client, "s2@campus.edu")
    r = client.post("/api/events/waitlisted-fest/register")
    assert r.status_code == 201
    assert r.json["status"] == "waitlisted"


def test_cancel_is_idempotent_and_frees_seat(app, client):
    _as(client, "s1@campus.edu")
    client.post("/api/events/small-workshop/register")

    r = client.delete("/api/events/small-workshop/register")
    assert r.status_code == 200
    assert r.json["success"] is True
    assert r.json["registration"]["status"] == "cancelled"

    r = client.delete("/api/events/small-workshop/register")
    assert r.status_code == 200
    assert r.json["registration"]["status"] == "cancelled"

    detail = client.get("/api/events/small-workshop").json
    assert detail["modules"]["registration"] == {"count": 0, "max": 2}


def test_cancel_without_registration_is_noop(client):
    _as(client, "s1@campus.edu")
    r = client.delete("/api/events/small-workshop/register")
    assert r.status_code == 200
    assert r.json == {"success": True, "registration": None}


def test_cancel_does_not_promote_waitlist(app, client):
    _as(client, "s1@campus.edu")
    client.post("/api/events/waitlisted-fest/register")
    _as(client, "s2@campus.edu")
    client.post("/api/events/waitlisted-fest/register")

    _as(client, "s1@campus.edu")
    client.delete("/api/events/waitlisted-fest/register")

    statuses = [st for _, st in _rows(app, "waitlisted-fest")]
    assert statuses == ["cancelled", "waitlisted"]


def test_reregister_reuses_cancelled_row(app, client):
    _as(client, "s1@campus.edu")
    first = client.post("/api/events/small-workshop/register").json
    client.delete("/api/events/small-workshop/register")

    again = client.post("/api/events/small-workshop/register")
    assert again.status_code == 201
    assert again.json["id"] == first["id"]
    assert again.json["status"] == "registered"
    assert len(_rows(app, "small-workshop")) == 1


def test_event_registrations_for_managers_only(client):
    _as(client, "s1@campus.edu")
    client.post("/api/events/small-workshop/register")
    assert client.get("/api/events/small-workshop/registrations").status_code == 403

    _as(client, "org@campus.edu")
    r = client.get("/api/events/small-workshop/registrations")
    assert r.status_code == 200
    assert [(x["user_name"], x["status"]) for x in r.json] == [("Student 1", "registered")]


def test_user_registration_history(app, client):
    _as(client, "s1@campus.edu")
    client.post("/api/events/small-workshop/register")
    me = client.get("/api/auth/me").json

    r = client.get(f"/api/users/{me['id']}/registrations")
    assert r.status_code == 200
    assert r.json[0]["event_slug"] == "small-workshop"
    assert r.json[0]["event_title"] == "Small Workshop"
    assert r.json[0]["event_status"] == "published"

    with session_scope(app) as s:
        other = s.query(User.id).filter(User.email == "s2@campus.edu").scalar()
    assert client.get(f"/api/users/{other}/registrations").status_code == 403
