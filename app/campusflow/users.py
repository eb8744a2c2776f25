from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.errors import NotFound
from app.campusflow.events.models import Event
from app.campusflow.models import ParticipationLog, User
from app.campusflow.modules.registration.models import Registration
from app.campusflow.rbac import require_role, require_self_or_admin
from app.campusflow.utils import isoformat

bp = Blueprint("users", __name__)


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "department": user.department,
        "year": user.year,
        "interests": list(user.interests or []),
        "avatar_url": user.avatar_url,
        "engagement_score": user.engagement_score,
        "created_at": isoformat(user.created_at),
    }


def _get_user(s, user_id: int) -> User:
    user = s.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@bp.get("")
@require_role("admin")
def users_list():
    s = db_session()
    users = s.query(User).order_by(User.name.asc(), User.id.asc()).all()
    return jsonify([user_to_dict(u) for u in users])


@bp.get("/<int:user_id>")
def users_detail(user_id: int):
    require_self_or_admin(user_id)
    s = db_session()
    return jsonify(user_to_dict(_get_user(s, user_id)))


@bp.get("/<int:user_id>/registrations")
def users_registrations(user_id: int):
    require_self_or_admin(user_id)
    s = db_session()
    rows = (
        s.query(Registration, Event)
        .join(Event, Registration.event_id == Event.id)
        .filter(Registration.user_id == user_id)
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
        .all()
    )
    out = []
    for reg, event in rows:
        out.append(
            {
                "id": reg.id,
                "event_id": reg.event_id,
                "user_id": reg.user_id,
                "status": reg.status,
                "team_id": reg.team_id,
                "registered_at": isoformat(reg.registered_at),
                "checked_in_at": isoformat(reg.checked_in_at),
                "event_title": event.title,
                "event_slug": event.slug,
                "event_type": event.event_type,
                "start_date": isoformat(event.start_date),
                "event_status": event.status,
            }
        )
    return jsonify(out)


@bp.get("/<int:user_id>/participation")
def users_participation(user_id: int):
    """Participation history across academic years, newest year first."""
    require_self_or_admin(user_id)
    s = db_session()
    rows = (
        s.query(ParticipationLog, Event.title)
        .join(Event, ParticipationLog.event_id == Event.id)
        .filter(ParticipationLog.user_id == user_id)
        .order_by(ParticipationLog.academic_year.desc(), ParticipationLog.created_at.desc())
        .all()
    )
    return jsonify(
        [
            {
                "id": p.id,
                "user_id": p.user_id,
                "event_id": p.event_id,
                "event_title": title,
                "academic_year": p.academic_year,
                "event_type": p.event_type,
                "role": p.role,
                "points_earned": p.points_earned,
                "certificate_issued": p.certificate_issued,
                "created_at": isoformat(p.created_at),
            }
            for p, title in rows
        ]
    )
