from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.campusflow.models import Base

if TYPE_CHECKING:
    from app.campusflow.events.models import Event
    from app.campusflow.models import User


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (
        # One row per (event, user); status changes reuse it.
        UniqueConstraint("event_id", "user_id", name="uq_registrations_event_user"),
        Index("idx_registrations_event", "event_id"),
        Index("idx_registrations_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="registered")  # registered, waitlisted, cancelled, attended
    team_id: Mapped[int | None] = mapped_column(ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    event: Mapped["Event"] = relationship("Event", lazy="joined")
    user: Mapped["User"] = relationship("User", lazy="joined")
