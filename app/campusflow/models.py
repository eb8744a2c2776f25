from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.campusflow.db import JSONList, JSONObject


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="student")  # student, organizer, admin
    department: Mapped[str | None] = mapped_column(String(128), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    interests: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    # Adjusted by participation (check-in); never recomputed from scratch.
    engagement_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)


class ModuleRegistryEntry(Base):
    """
    Seed-time snapshot of the module catalog. Platform-level, not per event.
    """

    __tablename__ = "module_registry"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # e.g. "voting"
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    default_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    config_schema: Mapped[dict] = mapped_column(JSONObject, nullable=False, default=dict)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ParticipationLog(Base):
    """
    Historical participation record, partitioned by academic year.
    Rows outlive the event lifecycle (archived events keep their history).
    """

    __tablename__ = "participation_log"
    __table_args__ = (
        Index("idx_participation_user", "user_id"),
        Index("idx_participation_year", "academic_year"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="RESTRICT"), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(16), nullable=False)  # e.g. "2025-26"
    event_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="participant")
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    certificate_issued: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)


class AuditEvent(Base):
    """
    Append-only audit trail event.
    Keep this table intentionally generic; module tables can refer to it by id if needed.
    """

    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    actor_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    actor_user_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    action: Mapped[str] = mapped_column(String(128), nullable=False)  # e.g. "registration.create"
    entity_type: Mapped[str | None] = mapped_column(String(128), nullable=True)  # e.g. "Event"
    entity_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # small JSON string


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.campusflow.events.models import Event, EventRole  # noqa: E402,F401
from app.campusflow.modules.registration.models import Registration  # noqa: E402,F401
from app.campusflow.modules.schedule.models import ScheduleItem  # noqa: E402,F401
from app.campusflow.modules.announcements.models import Announcement  # noqa: E402,F401
from app.campusflow.modules.teams.models import Team, TeamMember  # noqa: E402,F401
from app.campusflow.modules.voting.models import Vote, VotePoll  # noqa: E402,F401
