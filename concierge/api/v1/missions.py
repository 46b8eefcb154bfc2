"""Mission checklist API routes: organisation-scoped."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.api.deps import get_current_active_user, get_db
from concierge.api.errors import error_to_http
from concierge.models.user import User
from concierge.schemas.mission import ChecklistItemResponse, ChecklistItemToggle
from concierge.services.checklist_service import get_mission_checklist, toggle_checklist_item
from concierge.services.errors import ReservationError

router = APIRouter(prefix="/api/v1/missions", tags=["missions"])


@router.get(
    "/{mission_id}/checklist",
    response_model=list[ChecklistItemResponse],
    summary="Get the checklist copied onto a mission",
)
async def get_checklist(
    mission_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[ChecklistItemResponse]:
    try:
        items = await get_mission_checklist(db, current_user.organisation_id, mission_id)
    except ReservationError as exc:
        raise error_to_http(exc) from None
    return [ChecklistItemResponse.model_validate(item) for item in items]


@router.patch(
    "/checklist-items/{item_id}",
    response_model=ChecklistItemResponse,
    summary="Tick or untick a checklist item",
)
async def update_checklist_item(
    item_id: uuid.UUID,
    body: ChecklistItemToggle,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ChecklistItemResponse:
    """Record who completed the item and when. Unticking clears both."""
    try:
        item = await toggle_checklist_item(db, current_user, item_id, body.completed, body.notes)
    except ReservationError as exc:
        raise error_to_http(exc) from None
    return ChecklistItemResponse.model_validate(item)
