"""Mission service: derive operational missions from confirmed reservations.

A confirmed reservation fans out into exactly three missions: the guest's
arrival (CHECKIN), departure (CHECKOUT) and the turnover CLEANING. Each one
gets a snapshot of the unit's checklist for its type.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.config import settings
from concierge.database import is_violation_of
from concierge.models.enums import SETTLED_MISSION_STATUSES, MissionPriority, MissionStatus, MissionType
from concierge.models.mission import UQ_MISSION_PER_RESERVATION_TYPE, Mission
from concierge.services.checklist_service import bind_checklist

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedMission:
    type: MissionType
    priority: MissionPriority
    scheduled_at: datetime
    notes: str


def compute_mission_schedule(
    reservation_id: uuid.UUID,
    check_in_date: date,
    check_out_date: date,
    check_in_time: time | None = None,
    check_out_time: time | None = None,
) -> list[PlannedMission]:
    """Plan the CHECKIN, CHECKOUT and CLEANING missions of a stay.

    Missing times fall back to the configured defaults (15:00 / 11:00).
    Cleaning starts ``cleaning_offset_hours`` after check-out. Its hour is
    taken modulo 24 and, unless ``cleaning_rolls_over_midnight`` is set, stays
    on the check-out date: a 23:00 departure gives a 01:00 cleaning on the
    same calendar day, i.e. before the departure.
    """
    arrival = check_in_time or settings.default_check_in_time
    departure = check_out_time or settings.default_check_out_time

    checkout_at = datetime.combine(check_out_date, departure)
    if settings.cleaning_rolls_over_midnight:
        cleaning_at = checkout_at + timedelta(hours=settings.cleaning_offset_hours)
    else:
        cleaning_hour = (departure.hour + settings.cleaning_offset_hours) % 24
        cleaning_at = datetime.combine(check_out_date, departure.replace(hour=cleaning_hour))

    return [
        PlannedMission(
            type=MissionType.CHECKIN,
            priority=MissionPriority.NORMAL,
            scheduled_at=datetime.combine(check_in_date, arrival),
            notes=f"Check-in for reservation {reservation_id}",
        ),
        PlannedMission(
            type=MissionType.CHECKOUT,
            priority=MissionPriority.NORMAL,
            scheduled_at=checkout_at,
            notes=f"Check-out for reservation {reservation_id}",
        ),
        PlannedMission(
            type=MissionType.CLEANING,
            priority=MissionPriority.HIGH,
            scheduled_at=cleaning_at,
            notes=f"Turnover cleaning after reservation {reservation_id}",
        ),
    ]


async def count_reservation_missions(db: AsyncSession, reservation_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count()).select_from(Mission).where(Mission.reservation_id == reservation_id)
    )
    return result.scalar_one()


async def fan_out_missions(
    db: AsyncSession,
    reservation_id: uuid.UUID,
    unit_id: uuid.UUID,
    check_in_date: date,
    check_out_date: date,
    organisation_id: uuid.UUID,
    check_in_time: time | None = None,
    check_out_time: time | None = None,
) -> list[Mission]:
    """Create the reservation's missions once and attach their checklists.

    Returns the missions created by this call; an empty list means the
    reservation had already been fanned out. Checklist failures are logged
    per mission and never undo the missions themselves.
    """
    if await count_reservation_missions(db, reservation_id) > 0:
        logger.info("Missions already exist for reservation %s; skipping fan-out", reservation_id)
        return []

    missions = [
        Mission(
            organisation_id=organisation_id,
            unit_id=unit_id,
            reservation_id=reservation_id,
            type=planned.type.value,
            status=MissionStatus.TODO.value,
            priority=planned.priority.value,
            scheduled_at=planned.scheduled_at,
            notes=planned.notes,
        )
        for planned in compute_mission_schedule(
            reservation_id, check_in_date, check_out_date, check_in_time, check_out_time
        )
    ]

    try:
        async with db.begin_nested():
            db.add_all(missions)
            await db.flush()
    except IntegrityError as exc:
        if not is_violation_of(exc, UQ_MISSION_PER_RESERVATION_TYPE):
            raise
        # A concurrent request fanned out the same reservation first
        logger.warning("Concurrent fan-out detected for reservation %s; keeping existing missions", reservation_id)
        return []

    logger.info(
        "Created %d missions for reservation %s on unit %s",
        len(missions),
        reservation_id,
        unit_id,
    )

    for mission in missions:
        try:
            async with db.begin_nested():
                await bind_checklist(db, mission)
        except Exception:
            logger.exception(
                "Failed to copy checklist onto %s mission %s (reservation %s)",
                mission.type,
                mission.id,
                reservation_id,
            )

    return missions


async def cancel_dependent_missions(db: AsyncSession, reservation_ids: list[uuid.UUID]) -> int:
    """Cancel the reservations' missions that are not DONE (or already cancelled)."""
    if not reservation_ids:
        return 0
    result = await db.execute(
        update(Mission)
        .where(
            Mission.reservation_id.in_(reservation_ids),
            Mission.status.not_in(SETTLED_MISSION_STATUSES),
        )
        .values(status=MissionStatus.CANCELLED.value)
        .execution_options(synchronize_session="fetch")
    )
    logger.info("Cancelled %d mission(s) for %d reservation(s)", result.rowcount, len(reservation_ids))
    return result.rowcount


async def cancel_missions_by_id(db: AsyncSession, mission_ids: list[uuid.UUID]) -> int:
    """Cancel the given missions unless they are already settled."""
    if not mission_ids:
        return 0
    result = await db.execute(
        update(Mission)
        .where(Mission.id.in_(mission_ids), Mission.status.not_in(SETTLED_MISSION_STATUSES))
        .values(status=MissionStatus.CANCELLED.value)
        .execution_options(synchronize_session="fetch")
    )
    logger.info("Cancelled %d detached mission(s)", result.rowcount)
    return result.rowcount


async def list_reservation_missions(db: AsyncSession, reservation_id: uuid.UUID) -> list[Mission]:
    result = await db.execute(
        select(Mission).where(Mission.reservation_id == reservation_id).order_by(Mission.scheduled_at)
    )
    return list(result.scalars().all())
