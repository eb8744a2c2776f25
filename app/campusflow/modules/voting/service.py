from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from app.campusflow.audit import record_event
from app.campusflow.errors import Conflict, NotFound, ValidationError
from app.campusflow.modules.voting.models import Vote, VotePoll
from app.campusflow.utils import clean_str, clean_str_list, isoformat

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.campusflow.events.models import Event
    from app.campusflow.models import User


def validate_poll_payload(payload: dict) -> list[str]:
    """Validate poll creation payload. Returns list of errors."""
    errors = []
    if not clean_str(payload.get("question")):
        errors.append("Question is required")
    try:
        options = clean_str_list(payload.get("options"), "options")
    except ValidationError as e:
        errors.append(e.message)
    else:
        if len(options) < 2:
            errors.append("A poll needs at least two options")
    if not isinstance(payload.get("is_active", True), bool):
        errors.append("is_active must be true or false")
    return errors


def create_poll(s: "Session", event: "Event", payload: dict, user: "User") -> VotePoll:
    poll = VotePoll(
        event_id=event.id,
        question=clean_str(payload.get("question")),
        options=clean_str_list(payload.get("options"), "options"),
        is_active=payload.get("is_active", True),
        created_at=datetime.utcnow(),
    )
    s.add(poll)
    s.flush()
    record_event(
        s,
        actor=user,
        action="poll.create",
        entity_type="VotePoll",
        entity_id=poll.id,
        metadata={"event_id": event.id, "options": len(poll.options)},
    )
    return poll


def get_poll(s: "Session", event: "Event", poll_id: int) -> VotePoll:
    poll = s.get(VotePoll, poll_id)
    if poll is None or poll.event_id != event.id:
        raise NotFound("Poll not found")
    return poll


def cast_vote(s: "Session", poll: VotePoll, option_index: Any, user: "User") -> Vote:
    if not poll.is_active:
        raise ValidationError("Poll is closed")
    if isinstance(option_index, bool) or not isinstance(option_index, int):
        raise ValidationError("option_index must be an integer")
    if option_index < 0 or option_index >= len(poll.options):
        raise ValidationError("option_index out of range")

    existing = s.query(Vote.id).filter(Vote.poll_id == poll.id, Vote.user_id == user.id).first()
    if existing:
        raise Conflict("Already voted")

    vote = Vote(poll_id=poll.id, user_id=user.id, option_index=option_index, voted_at=datetime.utcnow())
    s.add(vote)
    try:
        s.flush()
    except IntegrityError as e:
        s.rollback()
        raise Conflict("Already voted") from e
    record_event(
        s,
        actor=user,
        action="vote.cast",
        entity_type="Vote",
        entity_id=vote.id,
        metadata={"poll_id": poll.id},
    )
    return vote


def tally(s: "Session", poll_id: int) -> list[dict[str, int]]:
    """
    Vote counts grouped by option index. Options nobody picked are absent, not
    zero-filled; readers treat a missing index as zero.
    """
    rows = (
        s.query(Vote.option_index, func.count(Vote.id))
        .filter(Vote.poll_id == poll_id)
        .group_by(Vote.option_index)
        .order_by(Vote.option_index.asc())
        .all()
    )
    return [{"option_index": idx, "count": count} for idx, count in rows]


def poll_to_dict(s: "Session", poll: VotePoll) -> dict[str, Any]:
    return {
        "id": poll.id,
        "event_id": poll.event_id,
        "question": poll.question,
        "options": list(poll.options),
        "is_active": poll.is_active,
        "created_at": isoformat(poll.created_at),
        "vote_counts": tally(s, poll.id),
    }


def fetch_module_data(s: "Session", event: "Event") -> list[dict[str, Any]]:
    polls = s.query(VotePoll).filter(VotePoll.event_id == event.id).order_by(VotePoll.id.asc()).all()
    return [poll_to_dict(s, p) for p in polls]
