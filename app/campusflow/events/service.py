from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Text, func, or_, select, type_coerce

from app.campusflow.audit import record_event
from app.campusflow.constants import (
    DEFAULT_MAX_PARTICIPANTS,
    EVENT_ROLES,
    EVENT_STATUS_TRANSITIONS,
    EVENT_STATUSES,
    EVENT_TYPES,
)
from app.campusflow.errors import NotFound, ValidationError
from app.campusflow.events.models import Event, EventRole
from app.campusflow.modules.registration.models import Registration
from app.campusflow.platform.modules import ModuleCatalog, validate_module_configs
from app.campusflow.platform.themes import ThemeRegistry, ThemeValidationError, resolve_theme_config
from app.campusflow.utils import clean_str, clean_str_list, isoformat, parse_datetime, parse_int, slugify

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.models import User

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "short_description",
    "event_type",
    "status",
    "department",
    "start_date",
    "end_date",
    "venue",
    "max_participants",
    "tags",
    "theme_config",
    "theme_preset",
    "enabled_modules",
    "module_configs",
    "cover_image",
)


def event_to_dict(event: Event, *, detail: bool = False, registration_count: int | None = None) -> dict[str, Any]:
    """
    Public event shape. List views leave out ``theme_config`` and ``module_configs``
    to keep payloads small; only slug-scoped detail reads carry them.
    """
    d: dict[str, Any] = {
        "id": event.id,
        "title": event.title,
        "slug": event.slug,
        "description": event.description,
        "short_description": event.short_description,
        "event_type": event.event_type,
        "status": event.status,
        "organizer_id": event.organizer_id,
        "organizer_name": event.organizer.name if event.organizer else None,
        "department": event.department,
        "start_date": isoformat(event.start_date),
        "end_date": isoformat(event.end_date),
        "venue": event.venue,
        "max_participants": event.max_participants,
        "tags": list(event.tags or []),
        "cover_image": event.cover_image,
        "enabled_modules": list(event.enabled_modules or []),
        "created_at": isoformat(event.created_at),
        "updated_at": isoformat(event.updated_at),
    }
    if detail:
        d["theme_config"] = event.theme_config or {}
        d["module_configs"] = event.module_configs or {}
    if registration_count is not None:
        d["registration_count"] = registration_count
    return d


def get_event_by_slug(s: "Session", slug: str) -> Event:
    event = s.query(Event).filter(Event.slug == slug).one_or_none()
    if event is None:
        raise NotFound("Event not found")
    return event


def registration_count_column():
    return (
        select(func.count(Registration.id))
        .where(Registration.event_id == Event.id, Registration.status != "cancelled")
        .correlate(Event)
        .scalar_subquery()
    )


def list_events(s: "Session", filters: dict[str, Any]) -> list[dict[str, Any]]:
    q = s.query(Event, registration_count_column())
    status = clean_str(filters.get("status"))
    if status:
        q = q.filter(Event.status == status)
    event_type = clean_str(filters.get("type"))
    if event_type:
        q = q.filter(Event.event_type == event_type)
    department = clean_str(filters.get("department"))
    if department:
        q = q.filter(Event.department == department)
    tag = clean_str(filters.get("tag"))
    if tag:
        # tags are stored as a JSON array of strings
        q = q.filter(type_coerce(Event.tags, Text).like(f'%"{tag}"%'))
    search = clean_str(filters.get("search"))
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Event.title.ilike(like), Event.description.ilike(like)))
    rows = q.order_by(Event.start_date.desc(), Event.id.desc()).all()
    return [event_to_dict(event, registration_count=count or 0) for event, count in rows]


def _validate_choice(value: str, choices: tuple[str, ...], field: str) -> list[str]:
    if value and value not in choices:
        return [f"Invalid {field}. Must be one of: {', '.join(choices)}"]
    return []


def validate_event_payload(payload: dict, catalog: ModuleCatalog, *, creating: bool) -> list[str]:
    """Validate event create/update payload. Returns list of errors."""
    errors: list[str] = []
    if creating and not clean_str(payload.get("title")):
        errors.append("Title is required")
    if "title" in payload and not creating and not clean_str(payload.get("title")):
        errors.append("Title cannot be empty")
    errors += _validate_choice(clean_str(payload.get("event_type")), EVENT_TYPES, "event_type")
    errors += _validate_choice(clean_str(payload.get("status")), EVENT_STATUSES, "status")
    try:
        max_participants = parse_int(payload.get("max_participants"), "max_participants")
    except ValidationError as e:
        errors.append(e.message)
    else:
        if max_participants is not None and max_participants < 0:
            errors.append("max_participants cannot be negative")
    errors += validate_module_configs(catalog, payload.get("module_configs"))
    return errors


def _enabled_modules(payload: dict, catalog: ModuleCatalog) -> list[str]:
    if payload.get("enabled_modules") is None:
        return catalog.default_enabled_ids()
    return clean_str_list(payload.get("enabled_modules"), "enabled_modules")


def _resolve_theme(themes: ThemeRegistry, payload: dict) -> dict[str, Any] | None:
    try:
        return resolve_theme_config(themes, payload)
    except ThemeValidationError as e:
        raise ValidationError(str(e)) from e


def _unique_slug(s: "Session", title: str) -> str:
    slug = slugify(title)
    candidate, n = slug, 1
    while s.query(Event.id).filter(Event.slug == candidate).first() is not None:
        n += 1
        candidate = f"{slug}-{n}"
    return candidate


def create_event(
    s: "Session",
    payload: dict,
    user: "User",
    *,
    catalog: ModuleCatalog,
    themes: ThemeRegistry,
) -> Event:
    """
    Create a draft event and make its creator the event head.

    Both rows are written in the caller's transaction, so a failure leaves
    neither behind.
    """
    errors = validate_event_payload(payload, catalog, creating=True)
    if errors:
        raise ValidationError.from_errors(errors)

    now = datetime.utcnow()
    title = clean_str(payload.get("title"))
    max_participants = parse_int(payload.get("max_participants"), "max_participants")
    event = Event(
        title=title,
        slug=_unique_slug(s, title),
        description=clean_str(payload.get("description")),
        short_description=clean_str(payload.get("short_description")),
        event_type=clean_str(payload.get("event_type")) or "general",
        status="draft",
        organizer_id=user.id,
        department=clean_str(payload.get("department")) or None,
        start_date=parse_datetime(payload.get("start_date"), "start_date"),
        end_date=parse_datetime(payload.get("end_date"), "end_date"),
        venue=clean_str(payload.get("venue")),
        max_participants=max_participants or DEFAULT_MAX_PARTICIPANTS,
        tags=clean_str_list(payload.get("tags"), "tags"),
        cover_image=clean_str(payload.get("cover_image")) or None,
        theme_config=_resolve_theme(themes, payload) or themes.get("default"),
        enabled_modules=_enabled_modules(payload, catalog),
        module_configs=dict(payload.get("module_configs") or {}),
        created_at=now,
        updated_at=now,
    )
    s.add(event)
    s.flush()

    s.add(EventRole(event_id=event.id, user_id=user.id, role="head", assigned_at=now))
    s.flush()

    record_event(
        s,
        actor=user,
        action="event.create",
        entity_type="Event",
        entity_id=event.id,
        metadata={"slug": event.slug, "event_type": event.event_type, "enabled_modules": event.enabled_modules},
    )
    logger.info("Event created id=%s slug=%s organizer=%s", event.id, event.slug, user.id)
    return event


def check_status_transition(current: str, new: str) -> None:
    if new == current:
        return
    if new not in EVENT_STATUS_TRANSITIONS.get(current, frozenset()):
        raise ValidationError(f"Cannot move event from {current} to {new}")


def update_event(
    s: "Session",
    event: Event,
    payload: dict,
    user: "User",
    *,
    catalog: ModuleCatalog,
    themes: ThemeRegistry,
) -> Event:
    """Apply a partial update. The slug is never updatable."""
    fields = [k for k in UPDATABLE_FIELDS if k in payload]
    if not fields:
        raise ValidationError("No valid fields to update")
    errors = validate_event_payload(payload, catalog, creating=False)
    if errors:
        raise ValidationError.from_errors(errors)

    changes: dict[str, Any] = {}

    def _set(attr: str, value: Any) -> None:
        old = getattr(event, attr)
        if old != value:
            changes[attr] = {"old": old, "new": value}
            setattr(event, attr, value)

    if "status" in payload and payload.get("status"):
        new_status = clean_str(payload.get("status"))
        check_status_transition(event.status, new_status)
        _set("status", new_status)
    if "title" in payload:
        _set("title", clean_str(payload.get("title")))
    for attr in ("description", "short_description", "venue"):
        if attr in payload:
            _set(attr, clean_str(payload.get(attr)))
    if "event_type" in payload and payload.get("event_type"):
        _set("event_type", clean_str(payload.get("event_type")))
    for attr in ("department", "cover_image"):
        if attr in payload:
            _set(attr, clean_str(payload.get(attr)) or None)
    for attr in ("start_date", "end_date"):
        if attr in payload:
            _set(attr, parse_datetime(payload.get(attr), attr))
    if "max_participants" in payload:
        _set("max_participants", parse_int(payload.get("max_participants"), "max_participants"))
    if "tags" in payload:
        _set("tags", clean_str_list(payload.get("tags"), "tags"))
    if "enabled_modules" in payload:
        _set("enabled_modules", clean_str_list(payload.get("enabled_modules"), "enabled_modules"))
    if "module_configs" in payload:
        _set("module_configs", dict(payload.get("module_configs") or {}))
    if "theme_preset" in payload or "theme_config" in payload:
        theme = _resolve_theme(themes, payload)
        if theme is not None:
            _set("theme_config", theme)

    event.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="event.update",
        entity_type="Event",
        entity_id=event.id,
        metadata={"slug": event.slug, "changed": sorted(changes)},
    )
    return event


def assign_event_role(s: "Session", event: Event, payload: dict, actor: "User") -> EventRole:
    from app.campusflow.models import User

    user_id = parse_int(payload.get("user_id"), "user_id")
    role = clean_str(payload.get("role"))
    if user_id is None or not role:
        raise ValidationError("user_id and role are required")
    if role not in EVENT_ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(EVENT_ROLES)}")
    if s.get(User, user_id) is None:
        raise NotFound("User not found")

    existing = s.query(EventRole).filter(EventRole.event_id == event.id, EventRole.user_id == user_id).one_or_none()
    if existing is not None:
        existing.role = role
        er = existing
    else:
        er = EventRole(event_id=event.id, user_id=user_id, role=role, assigned_at=datetime.utcnow())
        s.add(er)
    s.flush()
    record_event(
        s,
        actor=actor,
        action="event_role.assign",
        entity_type="EventRole",
        entity_id=er.id,
        metadata={"event_id": event.id, "user_id": user_id, "role": role},
    )
    return er


def require_module_enabled(event: Event, module_id: str) -> None:
    if module_id not in (event.enabled_modules or []):
        raise ValidationError(f"The {module_id} module is not enabled for this event")
