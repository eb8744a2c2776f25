from __future__ import annotations

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.errors import ValidationError
from app.campusflow.events.routes import json_body
from app.campusflow.events.service import get_event_by_slug, require_module_enabled
from app.campusflow.modules.voting.service import cast_vote, create_poll, get_poll, poll_to_dict, validate_poll_payload
from app.campusflow.rbac import require_event_manager, require_user

bp = Blueprint("voting", __name__)


@bp.post("/<slug>/polls")
def polls_create(slug: str):
    s = db_session()
    event = get_event_by_slug(s, slug)
    u = require_event_manager(s, event)
    require_module_enabled(event, "voting")
    payload = json_body()
    errors = validate_poll_payload(payload)
    if errors:
        raise ValidationError.from_errors(errors)
    poll = create_poll(s, event, payload, u)
    s.commit()
    return jsonify(poll_to_dict(s, poll)), 201


@bp.post("/<slug>/polls/<int:poll_id>/vote")
def polls_vote(slug: str, poll_id: int):
    u = require_user()
    s = db_session()
    event = get_event_by_slug(s, slug)
    require_module_enabled(event, "voting")
    poll = get_poll(s, event, poll_id)
    vote = cast_vote(s, poll, json_body().get("option_index"), u)
    s.commit()
    return jsonify({"id": vote.id, "poll_id": poll.id, "option_index": vote.option_index}), 201
