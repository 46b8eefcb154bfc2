"""Mission model: operational tasks (arrivals, departures, cleaning, repairs)."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from concierge.database import Base, TimestampMixin, UUIDPrimaryKeyMixin
from concierge.models.enums import MissionPriority, MissionStatus

UQ_MISSION_PER_RESERVATION_TYPE = "uq_missions_reservation_type"


class Mission(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A unit of work on a unit, optionally spawned by a reservation."""

    __tablename__ = "missions"

    organisation_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reservation_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("reservations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=MissionStatus.TODO.value, nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default=MissionPriority.NORMAL.value, nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    checklist_items: Mapped[list["MissionChecklistItem"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="mission",
        lazy="noload",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        # One derived mission per (reservation, type)
        Index(
            UQ_MISSION_PER_RESERVATION_TYPE,
            "reservation_id",
            "type",
            unique=True,
            postgresql_where=text("reservation_id IS NOT NULL"),
        ),
        Index("ix_missions_scheduled_at", "scheduled_at"),
    )

    def __repr__(self) -> str:
        return f"<Mission(id={self.id}, type={self.type}, status={self.status}, scheduled_at={self.scheduled_at})>"
