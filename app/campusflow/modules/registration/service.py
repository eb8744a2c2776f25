"""
Registration state machine.

    none -> registered      event open, capacity left (or no limit)
    none -> waitlisted      event open, full, waitlist enabled in module config
    registered/waitlisted -> cancelled   owner, any time; idempotent
    registered -> attended  check-in (see modules.checkin)

There is one row per (event, user): registering again after a cancellation
reuses the cancelled row. Cancelling never promotes anyone off the waitlist.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from app.campusflow.audit import record_event
from app.campusflow.constants import OPEN_EVENT_STATUSES
from app.campusflow.errors import Conflict, ValidationError
from app.campusflow.modules.registration.models import Registration
from app.campusflow.utils import isoformat

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.events.models import Event
    from app.campusflow.models import User

logger = logging.getLogger(__name__)


def registration_to_dict(reg: Registration) -> dict[str, Any]:
    return {
        "id": reg.id,
        "event_id": reg.event_id,
        "user_id": reg.user_id,
        "status": reg.status,
        "team_id": reg.team_id,
        "registered_at": isoformat(reg.registered_at),
        "checked_in_at": isoformat(reg.checked_in_at),
    }


def active_registration_count(s: "Session", event_id: int) -> int:
    """Registrations that hold (or wait for) a seat: everything but cancelled."""
    return (
        s.query(func.count(Registration.id))
        .filter(Registration.event_id == event_id, Registration.status != "cancelled")
        .scalar()
        or 0
    )


def waitlist_enabled(event: "Event") -> bool:
    return bool(event.module_config("registration").get("waitlist_enabled"))


def get_registration(s: "Session", event_id: int, user_id: int) -> Registration | None:
    return (
        s.query(Registration)
        .filter(Registration.event_id == event_id, Registration.user_id == user_id)
        .one_or_none()
    )


def _next_status(s: "Session", event: "Event") -> str:
    if not event.max_participants:
        return "registered"
    # Read-then-write: two requests racing for the last seat can both get in.
    count = active_registration_count(s, event.id)
    if count < event.max_participants:
        return "registered"
    if waitlist_enabled(event):
        return "waitlisted"
    raise ValidationError("Event is full")


def register(s: "Session", event: "Event", user: "User") -> Registration:
    """
    Register ``user`` for ``event``. Raises Conflict (carrying the existing row)
    when the user already holds a non-cancelled registration.
    """
    if event.status not in OPEN_EVENT_STATUSES:
        raise ValidationError("Event is not accepting registrations")

    existing = get_registration(s, event.id, user.id)
    if existing is not None and existing.status != "cancelled":
        raise Conflict("Already registered", payload={"registration": registration_to_dict(existing)})

    status = _next_status(s, event)
    now = datetime.utcnow()
    if existing is not None:
        existing.status = status
        existing.registered_at = now
        existing.checked_in_at = None
        reg = existing
    else:
        reg = Registration(event_id=event.id, user_id=user.id, status=status, registered_at=now)
        s.add(reg)
    try:
        s.flush()
    except IntegrityError as e:
        # Lost a race against a concurrent insert for the same pair.
        s.rollback()
        current = get_registration(s, event.id, user.id)
        payload = {"registration": registration_to_dict(current)} if current else None
        raise Conflict("Already registered", payload=payload) from e

    record_event(
        s,
        actor=user,
        action="registration.create",
        entity_type="Registration",
        entity_id=reg.id,
        metadata={"event_id": event.id, "status": status},
    )
    logger.info("Registration event=%s user=%s status=%s", event.id, user.id, status)
    return reg


def cancel(s: "Session", event: "Event", user: "User") -> Registration | None:
    """Cancel the user's registration. Nothing to cancel is a no-op, like cancelling twice."""
    reg = get_registration(s, event.id, user.id)
    if reg is None or reg.status == "cancelled":
        return reg
    previous = reg.status
    reg.status = "cancelled"
    record_event(
        s,
        actor=user,
        action="registration.cancel",
        entity_type="Registration",
        entity_id=reg.id,
        metadata={"event_id": event.id, "previous_status": previous},
    )
    return reg


def list_event_registrations(s: "Session", event: "Event") -> list[dict[str, Any]]:
    rows = (
        s.query(Registration)
        .filter(Registration.event_id == event.id)
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
        .all()
    )
    out = []
    for reg in rows:
        d = registration_to_dict(reg)
        d["user_name"] = reg.user.name
        d["user_email"] = reg.user.email
        d["user_department"] = reg.user.department
        out.append(d)
    return out


def fetch_module_data(s: "Session", event: "Event") -> dict[str, Any]:
    return {"count": active_registration_count(s, event.id), "max": event.max_participants}
