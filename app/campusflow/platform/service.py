from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func

from app.campusflow.constants import OPEN_EVENT_STATUSES
from app.campusflow.events.models import Event
from app.campusflow.models import ModuleRegistryEntry, User
from app.campusflow.modules.registration.models import Registration
from app.campusflow.platform.modules import ModuleCatalog

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def list_registry_modules(s: "Session", catalog: ModuleCatalog) -> list[dict[str, Any]]:
    """Module registry rows by sort order; the in-process catalog if nothing was seeded yet."""
    rows = s.query(ModuleRegistryEntry).order_by(ModuleRegistryEntry.sort_order.asc()).all()
    if not rows:
        return [m.to_dict() for m in catalog.all()]
    return [
        {
            "id": r.id,
            "name": r.name,
            "description": r.description,
            "icon": r.icon,
            "default_enabled": r.default_enabled,
            "config_schema": r.config_schema or {},
            "sort_order": r.sort_order,
        }
        for r in rows
    ]


def platform_stats(s: "Session") -> dict[str, Any]:
    total_users = s.query(func.count(User.id)).scalar() or 0
    total_events = s.query(func.count(Event.id)).scalar() or 0
    active_events = (
        s.query(func.count(Event.id)).filter(Event.status.in_(sorted(OPEN_EVENT_STATUSES))).scalar() or 0
    )
    total_registrations = (
        s.query(func.count(Registration.id)).filter(Registration.status != "cancelled").scalar() or 0
    )
    by_type = s.query(Event.event_type, func.count(Event.id)).group_by(Event.event_type).order_by(Event.event_type).all()
    by_status = s.query(Event.status, func.count(Event.id)).group_by(Event.status).order_by(Event.status).all()
    count_col = func.count(Event.id)
    top_departments = (
        s.query(Event.department, count_col)
        .filter(Event.department.isnot(None), Event.department != "")
        .group_by(Event.department)
        .order_by(count_col.desc(), Event.department.asc())
        .limit(5)
        .all()
    )
    return {
        "totalUsers": total_users,
        "totalEvents": total_events,
        "activeEvents": active_events,
        "totalRegistrations": total_registrations,
        "eventsByType": [{"event_type": t, "count": c} for t, c in by_type],
        "eventsByStatus": [{"status": st, "count": c} for st, c in by_status],
        "topDepartments": [{"department": d, "count": c} for d, c in top_departments],
    }
