"""Checklist models: per-unit templates and the per-mission copies made from them."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from concierge.database import Base, UUIDPrimaryKeyMixin


class ChecklistTemplate(UUIDPrimaryKeyMixin, Base):
    """Reusable list of verification steps for one unit and mission type."""

    __tablename__ = "checklist_templates"

    organisation_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
    )
    mission_type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    items: Mapped[list["ChecklistTemplateItem"]] = relationship(
        back_populates="template",
        lazy="noload",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_checklist_templates_unit_type", "unit_id", "mission_type"),)


class ChecklistTemplateItem(UUIDPrimaryKeyMixin, Base):
    """One step of a checklist template."""

    __tablename__ = "checklist_template_items"

    template_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("checklist_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    category: Mapped[str | None] = mapped_column(String(100), default=None)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    photo_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    template: Mapped["ChecklistTemplate"] = relationship(back_populates="items", lazy="noload")


class MissionChecklistItem(UUIDPrimaryKeyMixin, Base):
    """A checklist step attached to a mission.

    Title, category, position and the photo flag are copied from the template
    item when the mission is created. ``template_item_id`` only records where
    the copy came from; editing or deleting the template never changes it.
    """

    __tablename__ = "mission_checklist_items"

    mission_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("missions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    template_item_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("checklist_template_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    category: Mapped[str | None] = mapped_column(String(100), default=None)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    photo_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    mission: Mapped["Mission"] = relationship(back_populates="checklist_items", lazy="noload")  # type: ignore[name-defined]  # noqa: F821
