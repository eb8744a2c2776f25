from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.campusflow.audit import AUDIT_PAGE_LIMIT, audit_event_to_dict, audit_trail
from app.campusflow.db import db_session
from app.campusflow.errors import NotFound
from app.campusflow.extensions import module_catalog, theme_registry
from app.campusflow.models import User
from app.campusflow.platform.recommendations import recommend_events
from app.campusflow.platform.service import list_registry_modules, platform_stats
from app.campusflow.rbac import require_role, require_self_or_admin
from app.campusflow.utils import parse_int

bp = Blueprint("platform", __name__)


@bp.get("/modules")
def platform_modules():
    s = db_session()
    return jsonify(list_registry_modules(s, module_catalog()))


@bp.get("/themes")
def platform_themes():
    return jsonify(theme_registry().all())


@bp.get("/stats")
@require_role("admin")
def platform_stats_get():
    s = db_session()
    return jsonify(platform_stats(s))


@bp.get("/recommendations/<int:user_id>")
def platform_recommendations(user_id: int):
    require_self_or_admin(user_id)
    s = db_session()
    user = s.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return jsonify(recommend_events(s, user))


@bp.get("/audit")
@require_role("admin")
def platform_audit():
    s = db_session()
    limit = parse_int(request.args.get("limit"), "limit")
    rows = audit_trail(
        s,
        action=request.args.get("action") or None,
        entity_type=request.args.get("entity_type") or None,
        entity_id=request.args.get("entity_id") or None,
        limit=limit or AUDIT_PAGE_LIMIT,
    )
    return jsonify([audit_event_to_dict(ev) for ev in rows])
