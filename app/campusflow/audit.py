import json
from typing import Any

from flask import g, has_request_context
from sqlalchemy.orm import Session

from app.campusflow.models import AuditEvent, User
from app.campusflow.utils import isoformat

AUDIT_PAGE_LIMIT = 200


def record_event(
    s: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | int | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    """
    Append an audit event in the caller's transaction; it is committed (or
    rolled back) together with the write it describes.
    """
    if request_id is None and has_request_context():
        request_id = getattr(g, "request_id", None)
    ev = AuditEvent(
        request_id=request_id,
        actor_user_id=actor.id if actor else None,
        actor_user_email=actor.email if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=None if entity_id is None else str(entity_id),
        metadata_json=json.dumps(metadata, sort_keys=True, default=str) if metadata else None,
    )
    s.add(ev)
    return ev


def audit_event_to_dict(ev: AuditEvent) -> dict[str, Any]:
    return {
        "id": ev.id,
        "created_at": isoformat(ev.created_at),
        "request_id": ev.request_id,
        "actor_user_id": ev.actor_user_id,
        "actor_user_email": ev.actor_user_email,
        "action": ev.action,
        "entity_type": ev.entity_type,
        "entity_id": ev.entity_id,
        "metadata": json.loads(ev.metadata_json) if ev.metadata_json else None,
    }


def audit_trail(
    s: Session,
    *,
    action: str | None = None,
    entity_type: str | None = None,
    entity_id: str | int | None = None,
    limit: int = AUDIT_PAGE_LIMIT,
) -> list[AuditEvent]:
    """Newest first. ``action`` matches exactly or as a prefix ending in '.' (``"registration."``)."""
    q = s.query(AuditEvent)
    if action:
        if action.endswith("."):
            q = q.filter(AuditEvent.action.startswith(action))
        else:
            q = q.filter(AuditEvent.action == action)
    if entity_type:
        q = q.filter(AuditEvent.entity_type == entity_type)
    if entity_id is not None:
        q = q.filter(AuditEvent.entity_id == str(entity_id))
    limit = max(1, min(limit, AUDIT_PAGE_LIMIT))
    return q.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(limit).all()
