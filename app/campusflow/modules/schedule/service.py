from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.campusflow.audit import record_event
from app.campusflow.modules.schedule.models import ScheduleItem
from app.campusflow.utils import clean_str, isoformat, parse_datetime, parse_int

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.events.models import Event
    from app.campusflow.models import User


def validate_schedule_payload(payload: dict) -> list[str]:
    """Validate schedule item payload. Returns list of errors."""
    errors = []
    if not clean_str(payload.get("title")) or not clean_str(payload.get("start_time")):
        errors.append("Title and start_time required")
    return errors


def schedule_item_to_dict(item: ScheduleItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "event_id": item.event_id,
        "title": item.title,
        "description": item.description,
        "start_time": isoformat(item.start_time),
        "end_time": isoformat(item.end_time),
        "venue": item.venue,
        "speaker": item.speaker,
        "track": item.track,
        "sort_order": item.sort_order,
    }


def create_schedule_item(s: "Session", event: "Event", payload: dict, user: "User") -> ScheduleItem:
    item = ScheduleItem(
        event_id=event.id,
        title=clean_str(payload.get("title")),
        description=clean_str(payload.get("description")),
        start_time=parse_datetime(payload.get("start_time"), "start_time"),
        end_time=parse_datetime(payload.get("end_time"), "end_time"),
        venue=clean_str(payload.get("venue")),
        speaker=clean_str(payload.get("speaker")),
        track=clean_str(payload.get("track")) or None,
        sort_order=parse_int(payload.get("sort_order"), "sort_order") or 0,
    )
    s.add(item)
    s.flush()
    record_event(
        s,
        actor=user,
        action="schedule.create",
        entity_type="ScheduleItem",
        entity_id=item.id,
        metadata={"event_id": event.id, "title": item.title},
    )
    return item


def fetch_module_data(s: "Session", event: "Event") -> list[dict[str, Any]]:
    items = (
        s.query(ScheduleItem)
        .filter(ScheduleItem.event_id == event.id)
        .order_by(ScheduleItem.sort_order.asc(), ScheduleItem.id.asc())
        .all()
    )
    return [schedule_item_to_dict(i) for i in items]
