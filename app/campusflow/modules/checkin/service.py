from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from app.campusflow.audit import record_event
from app.campusflow.constants import DEFAULT_CHECKIN_POINTS
from app.campusflow.errors import NotFound, ValidationError
from app.campusflow.models import ParticipationLog, User
from app.campusflow.modules.registration.models import Registration
from app.campusflow.modules.registration.service import get_registration
from app.campusflow.utils import academic_year

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.events.models import Event

logger = logging.getLogger(__name__)


def checkin_points(event: "Event") -> int:
    points = event.module_config("checkin").get("points")
    if isinstance(points, bool) or not isinstance(points, (int, float)):
        return DEFAULT_CHECKIN_POINTS
    return int(points)


def check_in(s: "Session", event: "Event", user_id: int, actor: User) -> Registration:
    """
    Mark a registered participant as attended.

    The first check-in writes a participation log row and credits the points to
    the user's engagement score; later check-ins change nothing.
    """
    attendee = s.get(User, user_id)
    if attendee is None:
        raise NotFound("User not found")
    reg = get_registration(s, event.id, user_id)
    if reg is None:
        raise NotFound("Registration not found")
    if reg.status == "attended":
        return reg
    if reg.status != "registered":
        raise ValidationError(f"Cannot check in a {reg.status} registration")

    now = datetime.utcnow()
    points = checkin_points(event)
    reg.status = "attended"
    reg.checked_in_at = now
    s.add(
        ParticipationLog(
            user_id=user_id,
            event_id=event.id,
            academic_year=academic_year(event.start_date or now),
            event_type=event.event_type,
            role="participant",
            points_earned=points,
        )
    )
    attendee.engagement_score = (attendee.engagement_score or 0) + points
    attendee.updated_at = now

    record_event(
        s,
        actor=actor,
        action="registration.checkin",
        entity_type="Registration",
        entity_id=reg.id,
        metadata={"event_id": event.id, "user_id": user_id, "points": points},
    )
    logger.info("Check-in event=%s user=%s points=%s", event.id, user_id, points)
    return reg
