"""Tests for /api/platform and /api/users: registry, themes, stats, recommendations."""
import pytest
from werkzeug.security import generate_password_hash

from app.campusflow import auth, create_app
from app.campusflow.db import session_scope
from app.campusflow.events.models import Event
from app.campusflow.models import Base, ModuleRegistryEntry, User
from app.campusflow.modules.registration.models import Registration
from app.campusflow.platform.modules import default_catalog, sync_registry


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    auth._login_attempts.clear()

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    def _user(email, role, department=None, interests=()):
        return User(
            email=email,
            password_hash=generate_password_hash("pw12"),
            name=email.split("@")[0].title(),
            role=role,
            department=department,
            interests=list(interests),
        )

    with session_scope(app) as s:
        org = _user("org@campus.edu", "organizer", "CSE")
        ana = _user("ana@campus.edu", "student", "CSE", ["tech", "ai"])
        s.add_all([org, ana, _user("admin@campus.edu", "admin"), _user("karthik@campus.edu", "student", "ME")])
        s.flush()

        def _event(slug, status, tags, department, start, event_type="general"):
            from datetime import datetime

            return Event(
                title=slug.replace("-", " ").title(),
                slug=slug,
                status=status,
                event_type=event_type,
                organizer_id=org.id,
                department=department,
                tags=tags,
                start_date=datetime(2026, start, 1),
                enabled_modules=["registration"],
            )

        web = _event("web-summit", "published", ["tech", "web"], "CSE", 5, "seminar")
        music = _event("music-night", "published", ["music"], "Cultural", 3, "cultural")
        ml = _event("ml-day", "ongoing", ["ai", "ML"], "ECE", 4, "workshop")
        old = _event("old-hack", "archived", ["tech", "ai"], "CSE", 1, "hackathon")
        draft = _event("draft-tech", "draft", ["tech"], "CSE", 2)
        registered = _event("joined-already", "published", ["tech", "ai"], "CSE", 6)
        s.add_all([web, music, ml, old, draft, registered])
        s.flush()
        s.add(Registration(event_id=registered.id, user_id=ana.id, status="registered"))
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def _as(client, email):
    client.post("/api/auth/logout")
    r = client.post("/api/auth/login", json={"email": email, "password": "pw12"})
    assert r.status_code == 200
    return r.json["user"]


def test_modules_fall_back_to_catalog_then_registry(app, client):
    r = client.get("/api/platform/modules")
    assert r.status_code == 200
    assert [m["id"] for m in r.json] == default_catalog().ids()

    with session_scope(app) as s:
        sync_registry(s, default_catalog())
    with session_scope(app) as s:
        s.get(ModuleRegistryEntry, "voting").name = "Polls"

    r = client.get("/api/platform/modules")
    by_id = {m["id"]: m for m in r.json}
    assert by_id["voting"]["name"] == "Polls"
    assert by_id["leaderboard"]["config_schema"]["update_frequency"]["options"] == ["realtime", "hourly", "manual"]


def test_themes_listed(client):
    r = client.get("/api/platform/themes")
    assert set(r.json) == {"default", "hackathon", "cultural", "sports", "workshop"}
    for theme in r.json.values():
        assert len(theme["colors"]) == 10


def test_stats_admin_only(client):
    _as(client, "org@campus.edu")
    assert client.get("/api/platform/stats").status_code == 403

    _as(client, "admin@campus.edu")
    r = client.get("/api/platform/stats")
    assert r.status_code == 200
    stats = r.json
    assert stats["totalUsers"] == 4
    assert stats["totalEvents"] == 6
    assert stats["activeEvents"] == 4
    assert stats["totalRegistrations"] == 1
    assert stats["topDepartments"][0] == {"department": "CSE", "count": 4}
    assert {"status": "archived", "count": 1} in stats["eventsByStatus"]


def test_recommendations_ranked(client):
    ana = _as(client, "ana@campus.edu")
    r = client.get(f"/api/platform/recommendations/{ana['id']}")
    assert r.status_code == 200
    ranked = [(e["slug"], e["relevance_score"]) for e in r.json]
    # archived/draft and already-joined events never show up
    assert ranked == [("web-summit", 1.5), ("ml-day", 1.0), ("music-night", 0.0)]


def test_recommendation_ties_ordered_by_start_date(app, client):
    from datetime import datetime

    with session_scope(app) as s:
        org_id = s.query(User.id).filter(User.email == "org@campus.edu").scalar()
        for slug, start in (("late-talk", datetime(2026, 9, 1)), ("early-talk", datetime(2026, 2, 1))):
            s.add(
                Event(
                    title=slug,
                    slug=slug,
                    status="published",
                    organizer_id=org_id,
                    department="ME",
                    tags=["ai"],
                    start_date=start,
                    enabled_modules=["registration"],
                )
            )

    ana = _as(client, "ana@campus.edu")
    ranked = [(e["slug"], e["relevance_score"]) for e in client.get(f"/api/platform/recommendations/{ana['id']}").json]
    assert ranked == [
        ("web-summit", 1.5),
        ("early-talk", 1.0),
        ("ml-day", 1.0),
        ("late-talk", 1.0),
        ("music-night", 0.0),
    ]


def test_recommendations_self_or_admin(app, client):
    _as(client, "karthik@campus.edu")
    with session_scope(app) as s:
        ana_id = s.query(User.id).filter(User.email == "ana@campus.edu").scalar()
    assert client.get(f"/api/platform/recommendations/{ana_id}").status_code == 403

    _as(client, "admin@campus.edu")
    assert client.get(f"/api/platform/recommendations/{ana_id}").status_code == 200
    assert client.get("/api/platform/recommendations/9999").status_code == 404


def test_users_endpoints(client):
    ana = _as(client, "ana@campus.edu")
    assert client.get("/api/users").status_code == 403
    r = client.get(f"/api/users/{ana['id']}")
    assert r.json["interests"] == ["tech", "ai"]
    assert "password_hash" not in r.json

    _as(client, "admin@campus.edu")
    names = [u["name"] for u in client.get("/api/users").json]
    assert names == sorted(names)
    assert client.get("/api/users/9999").status_code == 404


def test_audit_trail_admin_only(client):
    _as(client, "ana@campus.edu")
    assert client.get("/api/platform/audit").status_code == 403

    _as(client, "admin@campus.edu")
    r = client.get("/api/platform/audit?action=auth.login")
    assert r.status_code == 200
    assert [e["actor_user_email"] for e in r.json] == ["admin@campus.edu", "ana@campus.edu"]

    actions = [e["action"] for e in client.get("/api/platform/audit?action=auth.").json]
    assert actions == ["auth.login", "auth.logout", "auth.login"]

    assert len(client.get("/api/platform/audit?action=auth.&limit=1").json) == 1
    assert client.get("/api/platform/audit?limit=many").status_code == 400
