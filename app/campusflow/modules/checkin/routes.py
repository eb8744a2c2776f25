from __future__ import annotations

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.errors import ValidationError
from app.campusflow.events.routes import json_body
from app.campusflow.events.service import get_event_by_slug, require_module_enabled
from app.campusflow.modules.checkin.service import check_in
from app.campusflow.modules.registration.service import registration_to_dict
from app.campusflow.rbac import require_event_manager
from app.campusflow.utils import parse_int

bp = Blueprint("checkin", __name__)


@bp.post("/<slug>/checkin")
def checkin_post(slug: str):
    s = db_session()
    event = get_event_by_slug(s, slug)
    u = require_event_manager(s, event)
    require_module_enabled(event, "checkin")
    user_id = parse_int(json_body().get("user_id"), "user_id")
    if user_id is None:
        raise ValidationError("user_id is required")
    reg = check_in(s, event, user_id, u)
    s.commit()
    return jsonify(registration_to_dict(reg))
