"""
Central constants for the Campus Flow application.
"""
from __future__ import annotations

EVENT_TYPES = ("fest", "workshop", "hackathon", "seminar", "competition", "cultural", "sports", "general")

EVENT_STATUSES = ("draft", "published", "ongoing", "archived")
OPEN_EVENT_STATUSES = frozenset({"published", "ongoing"})

# Lifecycle moves forward (skipping is fine); archived may be reopened as a draft.
EVENT_STATUS_TRANSITIONS = {
    "draft": frozenset({"published", "ongoing", "archived"}),
    "published": frozenset({"ongoing", "archived"}),
    "ongoing": frozenset({"archived"}),
    "archived": frozenset({"draft"}),
}

EVENT_ROLES = ("head", "coordinator", "volunteer")
EVENT_MANAGING_ROLES = frozenset({"head", "coordinator"})

ANNOUNCEMENT_PRIORITIES = ("low", "normal", "high", "urgent")

DEFAULT_MAX_PARTICIPANTS = 100
DEFAULT_TEAM_SIZE = 4
DEFAULT_CHECKIN_POINTS = 10
RECOMMENDATION_LIMIT = 10
DEPARTMENT_BOOST = 0.5
