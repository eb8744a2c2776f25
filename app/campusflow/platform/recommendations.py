"""
Interest-based event recommendations.

Score = number of the user's interests that appear (case-insensitive substring)
in any of the event's tags, plus a flat boost when the event belongs to the
user's department. Deterministic: no normalization, decay, or randomness.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from app.campusflow.constants import DEPARTMENT_BOOST, OPEN_EVENT_STATUSES, RECOMMENDATION_LIMIT
from app.campusflow.events.models import Event
from app.campusflow.events.service import event_to_dict, registration_count_column
from app.campusflow.modules.registration.models import Registration

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.models import User


def score_event(
    interests: Iterable[str],
    user_department: str | None,
    event_tags: Iterable[str],
    event_department: str | None,
) -> float:
    tags = [t.lower() for t in event_tags]
    matches = 0
    for interest in interests:
        needle = interest.lower()
        if any(needle in tag for tag in tags):
            matches += 1
    boost = DEPARTMENT_BOOST if event_department and event_department == user_department else 0.0
    return float(matches + boost)


def recommend_events(s: "Session", user: "User", *, limit: int = RECOMMENDATION_LIMIT) -> list[dict[str, Any]]:
    registered = select(Registration.event_id).where(
        Registration.user_id == user.id,
        Registration.status != "cancelled",
    )
    rows = (
        s.query(Event, registration_count_column())
        .filter(Event.status.in_(sorted(OPEN_EVENT_STATUSES)))
        .filter(Event.id.not_in(registered))
        .order_by(Event.start_date.asc(), Event.id.asc())
        .all()
    )

    interests = list(user.interests or [])
    scored = []
    for event, count in rows:
        d = event_to_dict(event, registration_count=count or 0)
        d["relevance_score"] = score_event(interests, user.department, event.tags or [], event.department)
        scored.append(d)

    # sort() is stable, so ties keep the start_date order
    scored.sort(key=lambda d: d["relevance_score"], reverse=True)
    return scored[:limit]
