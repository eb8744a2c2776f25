from __future__ import annotations

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.errors import ValidationError
from app.campusflow.events.routes import json_body
from app.campusflow.events.service import get_event_by_slug
from app.campusflow.modules.announcements.service import (
    announcement_to_dict,
    post_announcement,
    validate_announcement_payload,
)
from app.campusflow.rbac import require_event_manager

bp = Blueprint("announcements", __name__)


@bp.post("/<slug>/announcements")
def announcements_create(slug: str):
    s = db_session()
    event = get_event_by_slug(s, slug)
    u = require_event_manager(s, event)
    payload = json_body()
    errors = validate_announcement_payload(payload)
    if errors:
        raise ValidationError.from_errors(errors)
    a = post_announcement(s, event, payload, u)
    s.commit()
    return jsonify(announcement_to_dict(a)), 201
