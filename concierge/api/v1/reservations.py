"""Reservations API router.

Every reservation is scoped to the caller's organisation. Writes require an
administrator and are delegated to :mod:`concierge.services.reservation_service`,
which reports failures as an ``ActionResult`` translated here into the
matching HTTP status.
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.api.deps import get_current_active_user, get_current_admin, get_db
from concierge.api.errors import ensure_success, error_to_http
from concierge.models.enums import ReservationStatus
from concierge.models.user import User
from concierge.schemas.common import ActionResponse
from concierge.schemas.mission import MissionResponse
from concierge.schemas.reservation import (
    BulkReservationRequest,
    ReservationDetailResponse,
    ReservationInput,
    ReservationListResponse,
    ReservationResponse,
    RevenueResponse,
)
from concierge.services import reservation_service
from concierge.services.errors import NotFoundError
from concierge.services.results import ActionResult

router = APIRouter(prefix="/api/v1/reservations", tags=["reservations"])


def _to_response(result: ActionResult) -> ActionResponse:
    ensure_success(result)
    return ActionResponse(message=result.message, data=result.data)


# ---------------------------------------------------------------------------
# Bulk actions
# ---------------------------------------------------------------------------


@router.post(
    "/bulk-cancel",
    response_model=ActionResponse,
    summary="Cancel several reservations at once",
)
async def bulk_cancel(
    body: BulkReservationRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActionResponse:
    """Cancel the pending/confirmed reservations among ``ids``; ``data.count`` is how many changed."""
    result = await reservation_service.bulk_cancel_reservations(db, current_user, body.ids)
    return _to_response(result)


@router.post(
    "/bulk-delete",
    response_model=ActionResponse,
    summary="Delete several reservations at once",
)
async def bulk_delete(
    body: BulkReservationRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActionResponse:
    result = await reservation_service.bulk_delete_reservations(db, current_user, body.ids)
    return _to_response(result)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a reservation",
)
async def create_reservation(
    body: ReservationInput,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActionResponse:
    """Create a reservation on one of the organisation's units.

    A CONFIRMED reservation also gets its check-in, check-out and cleaning
    missions and, when it has an amount, its revenue entry.
    """
    result = await reservation_service.create_reservation(db, current_user, body)
    return _to_response(result)


@router.get(
    "",
    response_model=ReservationListResponse,
    summary="List the organisation's reservations",
)
async def list_reservations(
    unit_id: uuid.UUID | None = Query(None, description="Filter by unit"),
    status_filter: ReservationStatus | None = Query(None, alias="status", description="Filter by status"),
    check_in_from: date | None = Query(None, description="Reservations with check_in_date >= this date"),
    check_in_to: date | None = Query(None, description="Reservations with check_in_date <= this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    items, total = await reservation_service.list_reservations(
        db,
        current_user.organisation_id,
        unit_id=unit_id,
        status=status_filter.value if status_filter is not None else None,
        check_in_from=check_in_from,
        check_in_to=check_in_to,
        skip=skip,
        limit=limit,
    )
    return {"items": items, "total": total}


@router.get(
    "/{reservation_id}",
    response_model=ReservationDetailResponse,
    summary="Get a reservation with its missions and revenue",
)
async def get_reservation(
    reservation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ReservationDetailResponse:
    try:
        reservation, missions, revenue = await reservation_service.get_reservation_detail(
            db, current_user.organisation_id, reservation_id
        )
    except NotFoundError as exc:
        raise error_to_http(exc) from None

    base = ReservationResponse.model_validate(reservation)
    return ReservationDetailResponse(
        **base.model_dump(),
        missions=[MissionResponse.model_validate(mission) for mission in missions],
        revenue=RevenueResponse.model_validate(revenue) if revenue is not None else None,
    )


@router.put(
    "/{reservation_id}",
    response_model=ActionResponse,
    summary="Update a reservation",
)
async def update_reservation(
    reservation_id: uuid.UUID,
    body: ReservationInput,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActionResponse:
    """Replace a reservation's fields.

    Confirming a pending reservation creates its missions and revenue;
    cancelling cancels open missions and removes the revenue.
    """
    result = await reservation_service.update_reservation(db, current_user, reservation_id, body)
    return _to_response(result)


@router.post(
    "/{reservation_id}/terminate",
    response_model=ActionResponse,
    summary="Mark a confirmed reservation as completed",
)
async def terminate_reservation(
    reservation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActionResponse:
    result = await reservation_service.terminate_reservation(db, current_user, reservation_id)
    return _to_response(result)


@router.delete(
    "/{reservation_id}",
    response_model=ActionResponse,
    summary="Delete a reservation",
)
async def delete_reservation(
    reservation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActionResponse:
    """Delete a reservation. Its open missions are cancelled and its revenue removed."""
    result = await reservation_service.delete_reservation(db, current_user, reservation_id)
    return _to_response(result)
