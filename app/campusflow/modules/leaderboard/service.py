from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.campusflow.modules.teams.models import Team
from app.campusflow.modules.teams.service import member_count

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.events.models import Event


def fetch_module_data(s: "Session", event: "Event") -> list[dict[str, Any]]:
    """Team rankings, highest score first; ties by name."""
    teams = s.query(Team).filter(Team.event_id == event.id).order_by(Team.score.desc(), Team.name.asc(), Team.id.asc()).all()
    return [
        {
            "rank": rank,
            "id": t.id,
            "name": t.name,
            "score": t.score,
            "member_count": member_count(s, t.id),
        }
        for rank, t in enumerate(teams, start=1)
    ]
