from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from app.campusflow.db import db_session
from app.campusflow.errors import UpstreamError, ValidationError
from app.campusflow.events.service import (
    assign_event_role,
    create_event,
    event_to_dict,
    get_event_by_slug,
    list_events,
    update_event,
)
from app.campusflow.extensions import event_composer, module_catalog, theme_generator, theme_registry
from app.campusflow.platform.theme_generator import ThemeGenerationError, missing_answers
from app.campusflow.rbac import require_event_manager, require_role, require_user

bp = Blueprint("events", __name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@bp.get("")
def events_list():
    s = db_session()
    return jsonify(list_events(s, request.args))


@bp.post("")
@require_role("organizer", "admin")
def events_create():
    s = db_session()
    u = require_user()
    event = create_event(s, json_body(), u, catalog=module_catalog(), themes=theme_registry())
    s.commit()
    return jsonify(event_to_dict(event, detail=True)), 201


@bp.post("/generate-theme")
@require_role("organizer", "admin")
def events_generate_theme():
    answers = json_body()
    missing = missing_answers(answers)
    if missing:
        raise ValidationError(f"Missing answers: {', '.join(missing)}")
    try:
        theme = theme_generator().generate(answers)
    except ThemeGenerationError as e:
        current_app.logger.error("Theme generation failed: %s", e)
        raise UpstreamError("Failed to generate theme") from e
    return jsonify({"theme": theme})


@bp.get("/<slug>")
def events_detail(slug: str):
    s = db_session()
    return jsonify(event_composer().compose(s, slug))


@bp.patch("/<slug>")
def events_update(slug: str):
    s = db_session()
    event = get_event_by_slug(s, slug)
    u = require_event_manager(s, event)
    update_event(s, event, json_body(), u, catalog=module_catalog(), themes=theme_registry())
    s.commit()
    return jsonify(event_to_dict(event, detail=True))


@bp.post("/<slug>/roles")
def events_assign_role(slug: str):
    s = db_session()
    event = get_event_by_slug(s, slug)
    u = require_event_manager(s, event)
    er = assign_event_role(s, event, json_body(), u)
    s.commit()
    return jsonify({"id": er.id, "event_id": er.event_id, "user_id": er.user_id, "role": er.role}), 201
