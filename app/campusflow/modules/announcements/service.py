from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.campusflow.audit import record_event
from app.campusflow.constants import ANNOUNCEMENT_PRIORITIES
from app.campusflow.modules.announcements.models import Announcement
from app.campusflow.utils import clean_str, isoformat

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.events.models import Event
    from app.campusflow.models import User


def validate_announcement_payload(payload: dict) -> list[str]:
    """Validate announcement payload. Returns list of errors."""
    errors = []
    if not clean_str(payload.get("title")) or not clean_str(payload.get("body")):
        errors.append("Title and body required")
    priority = clean_str(payload.get("priority"))
    if priority and priority not in ANNOUNCEMENT_PRIORITIES:
        errors.append(f"Invalid priority. Must be one of: {', '.join(ANNOUNCEMENT_PRIORITIES)}")
    return errors


def announcement_to_dict(a: Announcement) -> dict[str, Any]:
    return {
        "id": a.id,
        "event_id": a.event_id,
        "title": a.title,
        "body": a.body,
        "priority": a.priority,
        "created_at": isoformat(a.created_at),
    }


def post_announcement(s: "Session", event: "Event", payload: dict, user: "User") -> Announcement:
    a = Announcement(
        event_id=event.id,
        title=clean_str(payload.get("title")),
        body=clean_str(payload.get("body")),
        priority=clean_str(payload.get("priority")) or "normal",
        created_at=datetime.utcnow(),
        created_by_user_id=user.id,
    )
    s.add(a)
    s.flush()
    record_event(
        s,
        actor=user,
        action="announcement.create",
        entity_type="Announcement",
        entity_id=a.id,
        metadata={"event_id": event.id, "priority": a.priority},
    )
    return a


def fetch_module_data(s: "Session", event: "Event") -> list[dict[str, Any]]:
    rows = (
        s.query(Announcement)
        .filter(Announcement.event_id == event.id)
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .all()
    )
    return [announcement_to_dict(a) for a in rows]
