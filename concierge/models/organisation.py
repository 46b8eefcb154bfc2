"""Organisation model: the concierge company owning every other record."""

from datetime import datetime

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from concierge.database import Base, UUIDPrimaryKeyMixin


class Organisation(UUIDPrimaryKeyMixin, Base):
    """A concierge business; all data is partitioned by organisation."""

    __tablename__ = "organisations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    users: Mapped[list["User"]] = relationship(back_populates="organisation", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    units: Mapped[list["Unit"]] = relationship(back_populates="organisation", lazy="noload")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Organisation(id={self.id}, name={self.name!r})>"
