"""Contract model: management agreements that set the commission rate."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from concierge.database import Base, UUIDPrimaryKeyMixin
from concierge.models.enums import ContractStatus, ContractType


class Contract(UUIDPrimaryKeyMixin, Base):
    """Commission agreement for one unit, or the whole organisation when ``unit_id`` is NULL."""

    __tablename__ = "contracts"

    organisation_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(20), default=ContractType.SIMPLE.value, nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)  # percent
    status: Mapped[str] = mapped_column(String(20), default=ContractStatus.ACTIVE.value, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (
        CheckConstraint("commission_rate >= 0 AND commission_rate <= 100", name="ck_contracts_commission_rate"),
        Index("ix_contracts_status_dates", "status", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return f"<Contract(id={self.id}, unit_id={self.unit_id}, rate={self.commission_rate}, status={self.status})>"
