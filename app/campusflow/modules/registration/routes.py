from __future__ import annotations

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.events.service import get_event_by_slug
from app.campusflow.modules.registration.service import (
    cancel,
    list_event_registrations,
    register,
    registration_to_dict,
)
from app.campusflow.rbac import require_event_manager, require_user

bp = Blueprint("registration", __name__)


@bp.post("/<slug>/register")
def register_post(slug: str):
    u = require_user()
    s = db_session()
    event = get_event_by_slug(s, slug)
    reg = register(s, event, u)
    s.commit()
    return jsonify(registration_to_dict(reg)), 201


@bp.delete("/<slug>/register")
def register_delete(slug: str):
    u = require_user()
    s = db_session()
    event = get_event_by_slug(s, slug)
    reg = cancel(s, event, u)
    s.commit()
    return jsonify({"success": True, "registration": registration_to_dict(reg) if reg else None})


@bp.get("/<slug>/registrations")
def registrations_list(slug: str):
    s = db_session()
    event = get_event_by_slug(s, slug)
    require_event_manager(s, event)
    return jsonify(list_event_registrations(s, event))
