"""Reservation model: guest stays on a unit."""

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text, Time, func
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from concierge.database import Base, TimestampMixin, UUIDPrimaryKeyMixin
from concierge.models.enums import BookingPlatform, PaymentStatus, ReservationStatus

NO_UNIT_OVERLAP = "no_unit_overlap"


class Reservation(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guest stay on a unit over the half-open range [check_in_date, check_out_date)."""

    __tablename__ = "reservations"

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
    guest_name: Mapped[str] = mapped_column(String(200), nullable=False)
    guest_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    guest_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    guest_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_in_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    platform: Mapped[str] = mapped_column(String(20), default=BookingPlatform.DIRECT.value, nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=ReservationStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    payment_status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.PENDING.value, nullable=False
    )
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    access_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    unit: Mapped["Unit"] = relationship(back_populates="reservations", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_reservations_unit_check_in", "unit_id", "check_in_date"),)

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, unit_id={self.unit_id}, "
            f"{self.check_in_date}->{self.check_out_date}, status={self.status})>"
        )


# Database-level no-overlap guarantee for non-cancelled stays on the same unit.
# daterange '[)' matches the application check: a check-out day may be the
# next guest's check-in day. Requires the btree_gist extension.
_reservations = Reservation.__table__
_reservations.append_constraint(
    ExcludeConstraint(
        (_reservations.c.unit_id, "="),
        (func.daterange(_reservations.c.check_in_date, _reservations.c.check_out_date, "[)"), "&&"),
        name=NO_UNIT_OVERLAP,
        using="gist",
        where=_reservations.c.status != ReservationStatus.CANCELLED.value,
    )
)
