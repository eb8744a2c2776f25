from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func

from app.campusflow.audit import record_event
from app.campusflow.constants import DEFAULT_TEAM_SIZE
from app.campusflow.errors import Conflict, NotFound, ValidationError
from app.campusflow.modules.registration.service import get_registration
from app.campusflow.modules.teams.models import Team, TeamMember
from app.campusflow.utils import clean_str, isoformat

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.events.models import Event
    from app.campusflow.models import User


def member_count(s: "Session", team_id: int) -> int:
    return s.query(func.count(TeamMember.user_id)).filter(TeamMember.team_id == team_id).scalar() or 0


def team_for_user(s: "Session", event_id: int, user_id: int) -> Team | None:
    return (
        s.query(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .filter(Team.event_id == event_id, TeamMember.user_id == user_id)
        .first()
    )


def get_team(s: "Session", event: "Event", team_id: int) -> Team:
    team = s.get(Team, team_id)
    if team is None or team.event_id != event.id:
        raise NotFound("Team not found")
    return team


def _link_registration(s: "Session", event: "Event", user: "User", team: Team) -> None:
    reg = get_registration(s, event.id, user.id)
    if reg is not None and reg.status != "cancelled":
        reg.team_id = team.id


def create_team(s: "Session", event: "Event", payload: dict, user: "User") -> Team:
    name = clean_str(payload.get("name"))
    if not name:
        raise ValidationError("Team name is required")
    if team_for_user(s, event.id, user.id) is not None:
        raise Conflict("Already in a team for this event")

    max_size = event.module_config("teams").get("max_team_size") or DEFAULT_TEAM_SIZE
    team = Team(event_id=event.id, name=name, leader_id=user.id, max_size=int(max_size), created_at=datetime.utcnow())
    team.members.append(TeamMember(user_id=user.id, role="leader"))
    s.add(team)
    s.flush()
    _link_registration(s, event, user, team)

    record_event(
        s,
        actor=user,
        action="team.create",
        entity_type="Team",
        entity_id=team.id,
        metadata={"event_id": event.id, "name": name},
    )
    return team


def join_team(s: "Session", event: "Event", team: Team, user: "User") -> Team:
    if team_for_user(s, event.id, user.id) is not None:
        raise Conflict("Already in a team for this event")
    if member_count(s, team.id) >= team.max_size:
        raise ValidationError("Team is full")
    team.members.append(TeamMember(user_id=user.id, role="member"))
    s.flush()
    _link_registration(s, event, user, team)

    record_event(
        s,
        actor=user,
        action="team.join",
        entity_type="Team",
        entity_id=team.id,
        metadata={"event_id": event.id},
    )
    return team


def set_team_score(s: "Session", team: Team, score: int, user: "User") -> Team:
    old = team.score
    team.score = score
    record_event(
        s,
        actor=user,
        action="team.score",
        entity_type="Team",
        entity_id=team.id,
        metadata={"old": old, "new": score},
    )
    return team


def team_to_dict(s: "Session", team: Team) -> dict[str, Any]:
    return {
        "id": team.id,
        "event_id": team.event_id,
        "name": team.name,
        "leader_id": team.leader_id,
        "leader_name": team.leader.name,
        "max_size": team.max_size,
        "member_count": member_count(s, team.id),
        "score": team.score,
        "created_at": isoformat(team.created_at),
    }


def fetch_module_data(s: "Session", event: "Event") -> list[dict[str, Any]]:
    teams = s.query(Team).filter(Team.event_id == event.id).order_by(Team.created_at.asc(), Team.id.asc()).all()
    return [team_to_dict(s, t) for t in teams]
