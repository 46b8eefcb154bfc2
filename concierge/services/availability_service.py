"""Availability checks: keeps a unit's non-cancelled stays from overlapping.

Two layers protect the no-overlap rule:

1. :func:`has_overlap`, run by the orchestrator before every write that
   leaves a reservation occupying the calendar, under a ``FOR UPDATE`` lock on
   the unit row (:func:`lock_unit`) so concurrent writers for one unit queue.
2. The ``no_unit_overlap`` exclusion constraint on ``reservations``, which
   rejects whatever slips past the application check.

Overlap formula (half-open ranges): ``existing.check_in < new.check_out AND
existing.check_out > new.check_in``. A stay may start on the day the
previous one ends.
"""

import logging
import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.models.enums import ReservationStatus
from concierge.models.reservation import Reservation
from concierge.models.unit import Unit

logger = logging.getLogger(__name__)


async def has_overlap(
    db: AsyncSession,
    unit_id: uuid.UUID,
    check_in_date: date,
    check_out_date: date,
    exclude_reservation_id: uuid.UUID | None = None,
) -> bool:
    """Whether a non-cancelled reservation on the unit intersects the range.

    If the lookup itself fails the answer is ``True``: refusing a valid
    booking can be retried, a double booking cannot be undone.
    """
    query = select(Reservation.id).where(
        Reservation.unit_id == unit_id,
        Reservation.status != ReservationStatus.CANCELLED.value,
        Reservation.check_in_date < check_out_date,
        Reservation.check_out_date > check_in_date,
    )
    if exclude_reservation_id is not None:
        query = query.where(Reservation.id != exclude_reservation_id)

    try:
        async with db.begin_nested():
            result = await db.execute(query.limit(1))
            conflicting_id = result.scalar_one_or_none()
    except SQLAlchemyError:
        logger.exception(
            "Overlap check failed for unit %s (%s -> %s); assuming overlap",
            unit_id,
            check_in_date,
            check_out_date,
        )
        return True

    if conflicting_id is not None:
        logger.info(
            "Unit %s already booked by reservation %s within %s -> %s",
            unit_id,
            conflicting_id,
            check_in_date,
            check_out_date,
        )
        return True
    return False


async def lock_unit(db: AsyncSession, unit_id: uuid.UUID, organisation_id: uuid.UUID) -> Unit | None:
    """Load a unit of the organisation with a row lock held until commit."""
    result = await db.execute(
        select(Unit)
        .where(Unit.id == unit_id, Unit.organisation_id == organisation_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()
