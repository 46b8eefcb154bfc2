"""Checklist service: bind unit templates to missions and track completion."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.models.checklist import ChecklistTemplate, ChecklistTemplateItem, MissionChecklistItem
from concierge.models.mission import Mission
from concierge.models.user import User
from concierge.services.errors import NotFoundError

logger = logging.getLogger(__name__)


async def find_applicable_template(
    db: AsyncSession,
    unit_id: uuid.UUID,
    mission_type: str,
    organisation_id: uuid.UUID,
) -> uuid.UUID | None:
    """Return the id of the active template for a unit and mission type, if any."""
    result = await db.execute(
        select(ChecklistTemplate.id)
        .where(
            ChecklistTemplate.unit_id == unit_id,
            ChecklistTemplate.mission_type == mission_type,
            ChecklistTemplate.organisation_id == organisation_id,
            ChecklistTemplate.is_active.is_(True),
        )
        .order_by(ChecklistTemplate.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def materialize_checklist(db: AsyncSession, template_id: uuid.UUID) -> list[ChecklistTemplateItem]:
    """Load a template's items in display order."""
    result = await db.execute(
        select(ChecklistTemplateItem)
        .where(ChecklistTemplateItem.template_id == template_id)
        .order_by(ChecklistTemplateItem.position, ChecklistTemplateItem.created_at)
    )
    return list(result.scalars().all())


async def bind_checklist(db: AsyncSession, mission: Mission) -> int:
    """Copy the matching template's items onto ``mission``.

    The copy is a snapshot: later template edits do not reach the mission.
    Returns the number of checklist rows created (0 when no template applies).
    """
    template_id = await find_applicable_template(db, mission.unit_id, mission.type, mission.organisation_id)
    if template_id is None:
        return 0

    items = await materialize_checklist(db, template_id)
    db.add_all(
        [
            MissionChecklistItem(
                mission_id=mission.id,
                template_item_id=item.id,
                title=item.title,
                description=item.description,
                category=item.category,
                position=item.position,
                photo_required=item.photo_required,
                completed=False,
            )
            for item in items
        ]
    )
    await db.flush()
    logger.debug("Bound %d checklist item(s) from template %s to mission %s", len(items), template_id, mission.id)
    return len(items)


# ---------------------------------------------------------------------------
# Mission checklist reads / updates
# ---------------------------------------------------------------------------


async def _get_mission(db: AsyncSession, organisation_id: uuid.UUID, mission_id: uuid.UUID) -> Mission:
    result = await db.execute(
        select(Mission).where(Mission.id == mission_id, Mission.organisation_id == organisation_id)
    )
    mission = result.scalar_one_or_none()
    if mission is None:
        raise NotFoundError("Mission not found")
    return mission


async def get_mission_checklist(
    db: AsyncSession,
    organisation_id: uuid.UUID,
    mission_id: uuid.UUID,
) -> list[MissionChecklistItem]:
    """Return a mission's checklist, ordered by position."""
    await _get_mission(db, organisation_id, mission_id)
    result = await db.execute(
        select(MissionChecklistItem)
        .where(MissionChecklistItem.mission_id == mission_id)
        .order_by(MissionChecklistItem.position, MissionChecklistItem.created_at)
    )
    return list(result.scalars().all())


async def toggle_checklist_item(
    db: AsyncSession,
    actor: User,
    item_id: uuid.UUID,
    completed: bool,
    notes: str | None = None,
) -> MissionChecklistItem:
    """Mark a checklist item done or not done, recording who and when."""
    result = await db.execute(
        select(MissionChecklistItem)
        .join(Mission, MissionChecklistItem.mission_id == Mission.id)
        .where(MissionChecklistItem.id == item_id, Mission.organisation_id == actor.organisation_id)
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFoundError("Checklist item not found")

    item.completed = completed
    item.completed_at = datetime.now(timezone.utc).replace(tzinfo=None) if completed else None
    item.completed_by_id = actor.id if completed else None
    if notes is not None:
        item.notes = notes
    await db.flush()
    return item
