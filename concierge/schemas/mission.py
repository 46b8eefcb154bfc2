"""Pydantic v2 schemas for missions and their checklists."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MissionResponse(BaseModel):
    """Mission as shown on a reservation or in the planning."""

    id: uuid.UUID
    unit_id: uuid.UUID
    reservation_id: uuid.UUID | None = None
    type: str
    status: str
    priority: str
    scheduled_at: datetime
    completed_at: datetime | None = None
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ChecklistItemResponse(BaseModel):
    """One step of a mission checklist."""

    id: uuid.UUID
    mission_id: uuid.UUID
    title: str
    description: str | None = None
    category: str | None = None
    position: int
    photo_required: bool
    completed: bool
    completed_at: datetime | None = None
    completed_by_id: uuid.UUID | None = None
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ChecklistItemToggle(BaseModel):
    """Mark a checklist step done or not done."""

    completed: bool
    notes: str | None = Field(None, max_length=5000)
