import pytest
from werkzeug.security import generate_password_hash

from app.campusflow import auth, create_app
from app.campusflow.db import session_scope
from app.campusflow.models import AuditEvent, Base, User


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    auth._login_attempts.clear()

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        s.add(
            User(
                email="admin@example.com",
                password_hash=generate_password_hash("pw12"),
                name="Admin",
                role="admin",
                interests=[],
            )
        )
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def test_health_ok(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json["status"] == "ok"
    assert r.json["modules"] == 7
    assert r.json["themes"] == 5

    r = client.get("/healthz")
    assert r.status_code == 200


def test_unknown_route_returns_json_error(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert "error" in r.json


def test_login_me_logout(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json["error"] == "Authentication required"

    r = client.post("/api/auth/login", json={"email": "ADMIN@example.com", "password": "pw12"})
    assert r.status_code == 200
    assert r.json["user"]["email"] == "admin@example.com"
    assert "password_hash" not in r.json["user"]

    r = client.get("/api/auth/me")
    assert r.status_code == 200
    assert r.json["role"] == "admin"

    r = client.post("/api/auth/logout")
    assert r.json["success"] is True
    assert client.get("/api/auth/me").status_code == 401


def test_login_bad_password_is_401_and_audited(app, client):
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong"})
    assert r.status_code == 401

    with session_scope(app) as s:
        actions = [a for (a,) in s.query(AuditEvent.action).all()]
    assert "auth.login_failed" in actions


def test_login_rate_limited(client):
    for _ in range(5):
        client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong"})
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "pw12"})
    assert r.status_code == 429


def test_signup_creates_student_and_signs_in(client):
    r = client.post(
        "/api/auth/signup",
        json={
            "email": "ana@campus.edu",
            "password": "pass123",
            "name": "Ana",
            "department": "CSE",
            "year": 2,
            "interests": ["tech", "ai"],
        },
    )
    assert r.status_code == 201
    user = r.json["user"]
    assert user["role"] == "student"
    assert user["interests"] == ["tech", "ai"]
    assert user["engagement_score"] == 0

    r = client.get("/api/auth/me")
    assert r.json["email"] == "ana@campus.edu"


def test_signup_cannot_create_admin(client):
    r = client.post(
        "/api/auth/signup",
        json={"email": "sneaky@campus.edu", "password": "pass123", "name": "Sneaky", "role": "admin"},
    )
    assert r.status_code == 201
    assert r.json["user"]["role"] == "student"


def test_signup_duplicate_email_conflict(client):
    r = client.post("/api/auth/signup", json={"email": "admin@example.com", "password": "pass123", "name": "Dup"})
    assert r.status_code == 409


def test_signup_missing_fields(client):
    r = client.post("/api/auth/signup", json={"email": "x@campus.edu"})
    assert r.status_code == 400
    assert "required" in r.json["error"]


def test_production_requires_postgres(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "a-real-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'prod.db'}")
    monkeypatch.setenv("ENV", "production")
    with pytest.raises(RuntimeError, match="Postgres"):
        create_app()
