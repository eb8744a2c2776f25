from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.campusflow.db import JSONList, JSONObject
from app.campusflow.models import Base

if TYPE_CHECKING:
    from app.campusflow.models import User


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_status", "status"),
        Index("idx_events_type", "event_type"),
        Index("idx_events_organizer", "organizer_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # Generated once from title + timestamp; never rewritten.
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    short_description: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    event_type: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="draft")  # draft, published, ongoing, archived
    organizer_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    department: Mapped[str | None] = mapped_column(String(128), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    venue: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    cover_image: Mapped[str | None] = mapped_column(String(512), nullable=True)

    # Snapshot of a theme preset (or generated theme); not a reference to the registry.
    theme_config: Mapped[dict] = mapped_column(JSONObject, nullable=False, default=dict)
    enabled_modules: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    module_configs: Mapped[dict] = mapped_column(JSONObject, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    organizer: Mapped["User"] = relationship("User", lazy="joined")

    def module_config(self, module_id: str) -> dict:
        cfg = (self.module_configs or {}).get(module_id)
        return cfg if isinstance(cfg, dict) else {}


class EventRole(Base):
    __tablename__ = "event_roles"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_roles_event_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)  # head, coordinator, volunteer
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    user: Mapped["User"] = relationship("User", lazy="joined")
