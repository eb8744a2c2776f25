from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, current_app, g, jsonify, request, session
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from app.campusflow.audit import record_event
from app.campusflow.db import db_session
from app.campusflow.errors import Conflict, Unauthorized, ValidationError
from app.campusflow.models import User
from app.campusflow.rbac import require_user
from app.campusflow.users import user_to_dict
from app.campusflow.utils import clean_str, clean_str_list, parse_int

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds
_MIN_PASSWORD_LENGTH = 4

# Admin accounts come from scripts/init_db.py, never from self-signup.
_SIGNUP_ROLES = ("student", "organizer")


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie.
    Also assigns a simple per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    if request.path.startswith(("/api/health", "/healthz")):
        g.current_user = None
        return

    user_id = session.get("user_id")
    if not user_id:
        g.current_user = None
        return

    try:
        s = db_session()
        user = s.get(User, int(user_id))
        if not user or not user.is_active:
            session.pop("user_id", None)
            g.current_user = None
            return
        g.current_user = user
    except Exception as e:
        current_app.logger.error("load_current_user DB error (clearing session): %s", e)
        session.pop("user_id", None)
        g.current_user = None


@bp.post("/signup")
def signup():
    data = request.get_json(silent=True) or {}
    email = clean_str(data.get("email")).lower()
    password = data.get("password") or ""
    name = clean_str(data.get("name"))

    if not email or not password or not name:
        raise ValidationError("Email, password, and name are required")
    if len(password) < _MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {_MIN_PASSWORD_LENGTH} characters")

    role = clean_str(data.get("role")) or "student"
    if role not in _SIGNUP_ROLES:
        role = "student"

    s = db_session()
    if s.query(User.id).filter(User.email == email).first():
        raise Conflict("An account with this email already exists")

    now = datetime.utcnow()
    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        name=name,
        role=role,
        department=clean_str(data.get("department")) or None,
        year=parse_int(data.get("year"), "year"),
        interests=clean_str_list(data.get("interests"), "interests"),
        created_at=now,
        updated_at=now,
    )
    s.add(user)
    try:
        s.flush()
    except IntegrityError as e:
        s.rollback()
        raise Conflict("An account with this email already exists") from e
    record_event(s, actor=user, action="auth.signup", entity_type="User", entity_id=user.id, metadata={"role": role})
    s.commit()

    session["user_id"] = user.id
    current_app.logger.info("New %s account id=%s", role, user.id)
    return jsonify({"user": user_to_dict(user)}), 201


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = clean_str(data.get("email")).lower()
    password = data.get("password") or ""
    ip = request.remote_addr or "unknown"

    if not email or not password:
        raise ValidationError("Email and password are required")
    if _check_rate_limit(ip):
        return jsonify({"error": "Too many login attempts. Please wait 5 minutes."}), 429

    _record_attempt(ip)

    s = db_session()
    user = s.query(User).filter(User.email == email).one_or_none()
    if not user or not user.is_active or not check_password_hash(user.password_hash, password):
        record_event(
            s,
            actor=None,
            action="auth.login_failed",
            entity_type="User",
            entity_id=email,
            metadata={"email": email},
        )
        s.commit()
        raise Unauthorized("Invalid email or password")

    session["user_id"] = user.id
    _login_attempts[ip].clear()
    record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=user.id)
    s.commit()
    return jsonify({"user": user_to_dict(user)})


@bp.post("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        s = db_session()
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=user.id)
        s.commit()
    session.pop("user_id", None)
    return jsonify({"success": True})


@bp.get("/me")
def me():
    user = require_user()
    return jsonify(user_to_dict(user))
