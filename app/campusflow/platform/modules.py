"""
Feature module catalog.

The catalog is static configuration: it is built once when the app starts and
handed to request code through ``app.extensions["module_catalog"]``. Changing it
means redeploying. Each module carries a descriptive config schema of the form
``{option_key: {"type", "label", "default"[, "options"]}}``.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleDefinition:
    id: str
    name: str
    description: str
    icon: str
    default_enabled: bool
    sort_order: int
    config_schema: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def defaults(self) -> dict[str, Any]:
        return {key: opt.get("default") for key, opt in self.config_schema.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "default_enabled": self.default_enabled,
            "config_schema": {k: dict(v) for k, v in self.config_schema.items()},
            "sort_order": self.sort_order,
        }


MODULES: tuple[ModuleDefinition, ...] = (
    ModuleDefinition(
        id="registration",
        name="Registration",
        description="Accept RSVPs and manage participant sign-ups",
        icon="clipboard-list",
        default_enabled=True,
        sort_order=1,
        config_schema={
            "max_participants": {"type": "number", "label": "Max Participants", "default": 100},
            "waitlist_enabled": {"type": "boolean", "label": "Enable Waitlist", "default": False},
            "requires_approval": {"type": "boolean", "label": "Require Approval", "default": False},
        },
    ),
    ModuleDefinition(
        id="schedule",
        name="Schedule",
        description="Timeline and agenda for the event",
        icon="calendar",
        default_enabled=True,
        sort_order=2,
        config_schema={
            "show_speakers": {"type": "boolean", "label": "Show Speakers", "default": True},
            "enable_tracks": {"type": "boolean", "label": "Enable Multi-Track", "default": False},
        },
    ),
    ModuleDefinition(
        id="announcements",
        name="Announcements",
        description="Post updates and alerts for participants",
        icon="megaphone",
        default_enabled=True,
        sort_order=3,
        config_schema={
            "allow_push": {"type": "boolean", "label": "Push Notifications", "default": False},
        },
    ),
    ModuleDefinition(
        id="teams",
        name="Team Formation",
        description="Allow participants to form or join teams",
        icon="users",
        default_enabled=False,
        sort_order=4,
        config_schema={
            "max_team_size": {"type": "number", "label": "Max Team Size", "default": 4},
            "min_team_size": {"type": "number", "label": "Min Team Size", "default": 2},
            "allow_solo": {"type": "boolean", "label": "Allow Solo Participation", "default": False},
        },
    ),
    ModuleDefinition(
        id="voting",
        name="Live Voting",
        description="Create polls and collect votes in real time",
        icon="vote",
        default_enabled=False,
        sort_order=5,
        config_schema={
            "anonymous": {"type": "boolean", "label": "Anonymous Votes", "default": True},
            "show_results_live": {"type": "boolean", "label": "Show Results Live", "default": True},
        },
    ),
    ModuleDefinition(
        id="checkin",
        name="QR Check-In",
        description="QR-code based attendance tracking",
        icon="qr-code",
        default_enabled=False,
        sort_order=6,
        config_schema={
            "generate_qr": {"type": "boolean", "label": "Auto-Generate QR", "default": True},
            "points": {"type": "number", "label": "Participation Points", "default": 10},
        },
    ),
    ModuleDefinition(
        id="leaderboard",
        name="Leaderboard",
        description="Track and display participant or team rankings",
        icon="trophy",
        default_enabled=False,
        sort_order=7,
        config_schema={
            "show_scores": {"type": "boolean", "label": "Show Scores Publicly", "default": True},
            "update_frequency": {
                "type": "select",
                "label": "Update Frequency",
                "options": ["realtime", "hourly", "manual"],
                "default": "manual",
            },
        },
    ),
)


class ModuleCatalog:
    """Ordered, read-only view over a set of module definitions."""

    def __init__(self, modules: Iterable[ModuleDefinition]):
        ordered = sorted(modules, key=lambda m: (m.sort_order, m.id))
        self._modules = tuple(ordered)
        self._by_id = MappingProxyType({m.id: m for m in ordered})

    def all(self) -> tuple[ModuleDefinition, ...]:
        return self._modules

    def get(self, module_id: str) -> ModuleDefinition | None:
        return self._by_id.get(module_id)

    def ids(self) -> list[str]:
        return [m.id for m in self._modules]

    def default_enabled_ids(self) -> list[str]:
        return [m.id for m in self._modules if m.default_enabled]

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._by_id

    def __len__(self) -> int:
        return len(self._modules)


def default_catalog() -> ModuleCatalog:
    return ModuleCatalog(MODULES)


def _check_option(module_id: str, key: str, spec: Mapping[str, Any], value: Any) -> str | None:
    kind = spec.get("type")
    if kind == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"{module_id}.{key} must be a number."
    elif kind == "boolean":
        if not isinstance(value, bool):
            return f"{module_id}.{key} must be true or false."
    elif kind == "select":
        options = list(spec.get("options") or [])
        if value not in options:
            return f"{module_id}.{key} must be one of: {', '.join(map(str, options))}"
    return None


def validate_module_configs(catalog: ModuleCatalog, configs: Any) -> list[str]:
    """
    Check event ``module_configs`` against the catalog schemas. Returns list of errors.

    Only known options of known modules are type-checked; anything else is kept
    as-is so that configs written for newer modules survive.
    """
    if configs is None:
        return []
    if not isinstance(configs, dict):
        return ["module_configs must be an object keyed by module id."]
    errors: list[str] = []
    for module_id, cfg in configs.items():
        definition = catalog.get(module_id)
        if definition is None:
            continue
        if not isinstance(cfg, dict):
            errors.append(f"Config for module '{module_id}' must be an object.")
            continue
        for key, value in cfg.items():
            spec = definition.config_schema.get(key)
            if spec is None or value is None:
                continue
            err = _check_option(module_id, key, spec, value)
            if err:
                errors.append(err)
    return errors


def sync_registry(s: Session, catalog: ModuleCatalog) -> int:
    """
    Snapshot the catalog into the module_registry table (idempotent). Returns rows written.
    """
    from app.campusflow.models import ModuleRegistryEntry

    written = 0
    for m in catalog.all():
        row = s.get(ModuleRegistryEntry, m.id)
        if row is None:
            row = ModuleRegistryEntry(id=m.id)
            s.add(row)
        row.name = m.name
        row.description = m.description
        row.icon = m.icon
        row.default_enabled = m.default_enabled
        row.config_schema = {k: dict(v) for k, v in m.config_schema.items()}
        row.sort_order = m.sort_order
        written += 1
    logger.info("Module registry synced: %d modules", written)
    return written
