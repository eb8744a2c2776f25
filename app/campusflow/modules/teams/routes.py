from __future__ import annotations

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.events.routes import json_body
from app.campusflow.events.service import get_event_by_slug, require_module_enabled
from app.campusflow.modules.teams.service import create_team, get_team, join_team, team_to_dict
from app.campusflow.rbac import require_user

bp = Blueprint("teams", __name__)


@bp.post("/<slug>/teams")
def teams_create(slug: str):
    u = require_user()
    s = db_session()
    event = get_event_by_slug(s, slug)
    require_module_enabled(event, "teams")
    team = create_team(s, event, json_body(), u)
    s.commit()
    return jsonify(team_to_dict(s, team)), 201


@bp.post("/<slug>/teams/<int:team_id>/join")
def teams_join(slug: str, team_id: int):
    u = require_user()
    s = db_session()
    event = get_event_by_slug(s, slug)
    require_module_enabled(event, "teams")
    team = join_team(s, event, get_team(s, event, team_id), u)
    s.commit()
    return jsonify(team_to_dict(s, team))
