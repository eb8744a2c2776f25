from __future__ import annotations

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.errors import ValidationError
from app.campusflow.events.routes import json_body
from app.campusflow.events.service import get_event_by_slug
from app.campusflow.modules.schedule.service import (
    create_schedule_item,
    schedule_item_to_dict,
    validate_schedule_payload,
)
from app.campusflow.rbac import require_event_manager

bp = Blueprint("schedule", __name__)


@bp.post("/<slug>/schedule")
def schedule_create(slug: str):
    s = db_session()
    event = get_event_by_slug(s, slug)
    u = require_event_manager(s, event)
    payload = json_body()
    errors = validate_schedule_payload(payload)
    if errors:
        raise ValidationError.from_errors(errors)
    item = create_schedule_item(s, event, payload, u)
    s.commit()
    return jsonify(schedule_item_to_dict(item)), 201
