from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g

from app.campusflow.constants import EVENT_MANAGING_ROLES
from app.campusflow.errors import Forbidden, Unauthorized
from app.campusflow.models import User


def current_user() -> User | None:
    return getattr(g, "current_user", None)


def require_user() -> User:
    user = current_user()
    if not user or not user.is_active:
        raise Unauthorized("Authentication required")
    return user


def require_role(*roles: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user = require_user()
            if roles and user.role not in roles:
                raise Forbidden(f"Requires role: {' or '.join(roles)}")
            return fn(*args, **kwargs)

        return wrapped

    return decorator


def can_manage_event(s, user: User | None, event) -> bool:
    """Admins, the event's organizer, and its head/coordinator roles may manage it."""
    if not user or not user.is_active:
        return False
    if user.role == "admin" or event.organizer_id == user.id:
        return True
    from app.campusflow.events.models import EventRole

    role = (
        s.query(EventRole.role)
        .filter(EventRole.event_id == event.id, EventRole.user_id == user.id)
        .scalar()
    )
    return role in EVENT_MANAGING_ROLES


def require_event_manager(s, event) -> User:
    user = require_user()
    if not can_manage_event(s, user, event):
        raise Forbidden("Only the event's organizers can do this")
    return user


def require_self_or_admin(user_id: int) -> User:
    user = require_user()
    if user.id != user_id and user.role != "admin":
        raise Forbidden("Not allowed to view another user's data")
    return user
