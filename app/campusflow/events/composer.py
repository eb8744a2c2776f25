"""
Event composition.

An event's public page is one payload: the event record plus, for every module
the event has enabled, that module's data under ``modules[<module_id>]``.
Module data comes from a handler map so new modules plug in with
``composer.register(...)``. Module IDs without a handler (``checkin`` has no
page data; unknown IDs may come from newer clients) are skipped silently.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from app.campusflow.events.models import Event, EventRole
from app.campusflow.events.service import event_to_dict, get_event_by_slug
from app.campusflow.modules.announcements import service as announcements
from app.campusflow.modules.leaderboard import service as leaderboard
from app.campusflow.modules.registration import service as registration
from app.campusflow.modules.schedule import service as schedule
from app.campusflow.modules.teams import service as teams
from app.campusflow.modules.voting import service as voting

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ModuleHandler = Callable[["Session", Event], Any]


def default_handlers() -> dict[str, ModuleHandler]:
    return {
        "registration": registration.fetch_module_data,
        "schedule": schedule.fetch_module_data,
        "announcements": announcements.fetch_module_data,
        "teams": teams.fetch_module_data,
        "voting": voting.fetch_module_data,
        "leaderboard": leaderboard.fetch_module_data,
    }


def event_roles(s: "Session", event: Event) -> list[dict[str, Any]]:
    rows = s.query(EventRole).filter(EventRole.event_id == event.id).order_by(EventRole.id.asc()).all()
    return [
        {
            "id": r.id,
            "event_id": r.event_id,
            "user_id": r.user_id,
            "user_name": r.user.name,
            "role": r.role,
        }
        for r in rows
    ]


class EventComposer:
    def __init__(self, handlers: Mapping[str, ModuleHandler] | None = None):
        self._handlers: dict[str, ModuleHandler] = dict(default_handlers() if handlers is None else handlers)

    @property
    def handlers(self) -> Mapping[str, ModuleHandler]:
        return MappingProxyType(self._handlers)

    def register(self, module_id: str, handler: ModuleHandler) -> None:
        self._handlers[module_id] = handler

    def module_data(self, s: "Session", event: Event) -> dict[str, Any]:
        modules: dict[str, Any] = {}
        for module_id in event.enabled_modules or []:
            handler = self._handlers.get(module_id)
            if handler is None or module_id in modules:
                continue
            modules[module_id] = handler(s, event)
        return modules

    def compose_event(self, s: "Session", event: Event) -> dict[str, Any]:
        payload = event_to_dict(event, detail=True)
        payload["modules"] = self.module_data(s, event)
        payload["roles"] = event_roles(s, event)
        return payload

    def compose(self, s: "Session", slug: str) -> dict[str, Any]:
        """Full microsite payload for ``slug``. Raises NotFound for unknown slugs."""
        event = get_event_by_slug(s, slug)
        payload = self.compose_event(s, event)
        logger.debug("Composed event=%s modules=%s", event.id, sorted(payload["modules"]))
        return payload
