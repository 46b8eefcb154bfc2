"""Unit model: rentable properties ("logements") managed by the organisation."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from concierge.database import Base, UUIDPrimaryKeyMixin
from concierge.models.enums import UnitStatus


class Unit(UUIDPrimaryKeyMixin, Base):
    """An apartment, house or villa rented out on behalf of an owner."""

    __tablename__ = "units"

    organisation_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address_line1: Mapped[str | None] = mapped_column(String(500), default=None)
    city: Mapped[str | None] = mapped_column(String(200), default=None)
    max_guests: Mapped[int | None] = mapped_column(default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(20), server_default=UnitStatus.ACTIVE.value)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    # Relationships
    organisation: Mapped["Organisation"] = relationship(back_populates="units", lazy="noload")  # type: ignore[name-defined]  # noqa: F821
    reservations: Mapped[list["Reservation"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="unit", lazy="noload", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, name={self.name!r}, status={self.status!r})>"
