from __future__ import annotations

from flask import Blueprint, jsonify

from app.campusflow.db import db_session
from app.campusflow.errors import ValidationError
from app.campusflow.events.routes import json_body
from app.campusflow.events.service import get_event_by_slug, require_module_enabled
from app.campusflow.modules.teams.service import get_team, set_team_score, team_to_dict
from app.campusflow.rbac import require_event_manager
from app.campusflow.utils import parse_int

bp = Blueprint("leaderboard", __name__)


@bp.post("/<slug>/teams/<int:team_id>/score")
def leaderboard_score(slug: str, team_id: int):
    s = db_session()
    event = get_event_by_slug(s, slug)
    u = require_event_manager(s, event)
    require_module_enabled(event, "leaderboard")
    score = parse_int(json_body().get("score"), "score")
    if score is None:
        raise ValidationError("score is required")
    team = set_team_score(s, get_team(s, event, team_id), score, u)
    s.commit()
    return jsonify(team_to_dict(s, team))
