"""Reservation orchestrator: every write to a reservation goes through here.

Mutating entry points share one shape: ``(db, actor, ...) -> ActionResult``.
They are wrapped by :func:`admin_action`, which refuses non-admin actors
before anything else runs and executes the body inside a SAVEPOINT, so a
failed action leaves no partial writes behind and never raises.

Lifecycle::

    PENDING --confirm--> CONFIRMED --terminate--> COMPLETED
    PENDING --cancel-->  CANCELLED
    CONFIRMED --cancel--> CANCELLED

Confirming a reservation fans out its missions and records its ledger
entry; cancelling it cancels the missions that are not done yet and drops
the ledger entry.
"""

import functools
import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable
from datetime import date
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.config import settings
from concierge.database import is_violation_of
from concierge.models.enums import OCCUPYING_STATUSES, ReservationStatus
from concierge.models.mission import Mission
from concierge.models.reservation import NO_UNIT_OVERLAP, Reservation
from concierge.models.revenue import Revenue
from concierge.models.user import User
from concierge.schemas.reservation import ReservationInput
from concierge.services.availability_service import has_overlap, lock_unit
from concierge.services.contract_service import resolve_active_contract
from concierge.services.errors import (
    AuthorizationError,
    InfrastructureError,
    NotFoundError,
    OverlapError,
    ReservationError,
    ValidationError,
)
from concierge.services.ledger_service import delete_ledger_entries, get_ledger_entry, record_ledger_entry
from concierge.services.mission_service import (
    cancel_dependent_missions,
    cancel_missions_by_id,
    fan_out_missions,
    list_reservation_missions,
)
from concierge.services.results import ActionResult

logger = logging.getLogger(__name__)

PENDING = ReservationStatus.PENDING.value
CONFIRMED = ReservationStatus.CONFIRMED.value
COMPLETED = ReservationStatus.COMPLETED.value
CANCELLED = ReservationStatus.CANCELLED.value

CREATABLE_STATUSES = frozenset({PENDING, CONFIRMED})

# Status changes accepted by update_reservation. COMPLETED is only reached
# through terminate_reservation.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({PENDING, CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({CONFIRMED, CANCELLED}),
    CANCELLED: frozenset({CANCELLED}),
    COMPLETED: frozenset({COMPLETED}),
}


# ---------------------------------------------------------------------------
# Action boundary
# ---------------------------------------------------------------------------


def admin_action(func: Callable[..., Awaitable[ActionResult]]) -> Callable[..., Awaitable[ActionResult]]:
    """Gate an orchestrator entry point to admins and turn errors into results."""

    @functools.wraps(func)
    async def wrapper(db: AsyncSession, actor: User | None, *args: Any, **kwargs: Any) -> ActionResult:
        if actor is None or not actor.is_admin:
            logger.warning(
                "Refused %s for user %s (role=%s)",
                func.__name__,
                getattr(actor, "id", None),
                getattr(actor, "role", None),
            )
            return ActionResult.fail(AuthorizationError())

        try:
            async with db.begin_nested():
                return await func(db, actor, *args, **kwargs)
        except ReservationError as exc:
            logger.info("%s rejected: %s (%s)", func.__name__, exc.message, exc.kind.value)
            return ActionResult.fail(exc)
        except SQLAlchemyError:
            logger.exception("%s failed on a database error", func.__name__)
            return ActionResult.fail(InfrastructureError("The reservation store is unavailable, please retry"))

    return wrapper


async def _run_secondary(
    db: AsyncSession,
    step: str,
    operation: Callable[..., Awaitable[int]],
    *args: Any,
) -> None:
    """Run a follow-up write in its own savepoint; failures are only logged."""
    try:
        async with db.begin_nested():
            await operation(db, *args)
    except Exception:
        logger.exception("Secondary step %r failed", step)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_input(data: ReservationInput | dict[str, Any]) -> ReservationInput:
    if isinstance(data, ReservationInput):
        return data
    try:
        return ReservationInput.model_validate(data)
    except PydanticValidationError as exc:
        field_errors: dict[str, str] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__all__"
            # Our own validators raise ValueError; report their text without pydantic's prefix
            message = error["msg"]
            if error["type"] == "value_error" and "error" in error.get("ctx", {}):
                message = str(error["ctx"]["error"])
            field_errors.setdefault(field, message)
        raise ValidationError("Invalid reservation data", field_errors) from exc


def _parse_ids(ids: Iterable[Any] | None) -> list[uuid.UUID]:
    raw_ids = list(ids or [])
    if not 1 <= len(raw_ids) <= settings.bulk_max_items:
        raise ValidationError(
            f"Select between 1 and {settings.bulk_max_items} reservations",
            {"ids": f"Expected 1 to {settings.bulk_max_items} ids, got {len(raw_ids)}"},
        )
    parsed: list[uuid.UUID] = []
    for raw in raw_ids:
        try:
            parsed.append(raw if isinstance(raw, uuid.UUID) else uuid.UUID(str(raw)))
        except ValueError:
            raise ValidationError("Invalid reservation id", {"ids": f"Invalid reservation id: {raw}"}) from None
    return list(dict.fromkeys(parsed))


async def _get_reservation(db: AsyncSession, organisation_id: uuid.UUID, reservation_id: uuid.UUID) -> Reservation:
    result = await db.execute(
        select(Reservation).where(
            Reservation.id == reservation_id,
            Reservation.organisation_id == organisation_id,
        )
    )
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFoundError("Reservation not found")
    return reservation


async def _claim_dates(
    db: AsyncSession,
    organisation_id: uuid.UUID,
    payload: ReservationInput,
    exclude_reservation_id: uuid.UUID | None = None,
) -> None:
    """Lock the unit and make sure the stay fits in its calendar."""
    unit = await lock_unit(db, payload.unit_id, organisation_id)
    if unit is None:
        raise NotFoundError("Unit not found")
    if payload.status == CANCELLED:
        return
    if await has_overlap(db, payload.unit_id, payload.check_in_date, payload.check_out_date, exclude_reservation_id):
        raise OverlapError()


async def _write(db: AsyncSession, reservation: Reservation) -> None:
    try:
        async with db.begin_nested():
            db.add(reservation)
            await db.flush()
    except IntegrityError as exc:
        if is_violation_of(exc, NO_UNIT_OVERLAP):
            logger.warning("Overlap on unit %s caught by the exclusion constraint", reservation.unit_id)
            raise OverlapError() from exc
        raise


async def _on_confirmed(db: AsyncSession, reservation: Reservation) -> None:
    await fan_out_missions(
        db,
        reservation.id,
        reservation.unit_id,
        reservation.check_in_date,
        reservation.check_out_date,
        reservation.organisation_id,
        reservation.check_in_time,
        reservation.check_out_time,
    )
    if reservation.amount is None:
        return
    contract = await resolve_active_contract(
        db, reservation.unit_id, reservation.check_in_date, reservation.organisation_id
    )
    await record_ledger_entry(db, reservation, contract)


async def _on_cancelled(db: AsyncSession, reservation_ids: list[uuid.UUID]) -> None:
    await cancel_dependent_missions(db, reservation_ids)
    await delete_ledger_entries(db, reservation_ids)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@admin_action
async def create_reservation(
    db: AsyncSession,
    actor: User,
    data: ReservationInput | dict[str, Any],
) -> ActionResult:
    """Create a PENDING or CONFIRMED reservation.

    A confirmed reservation immediately gets its missions and, when it has
    an amount, its ledger entry priced with the contract in force on the
    check-in date.
    """
    payload = _parse_input(data)
    if payload.status not in CREATABLE_STATUSES:
        raise ValidationError(
            "New reservations must be PENDING or CONFIRMED",
            {"status": f"Cannot create a reservation with status {payload.status}"},
        )

    await _claim_dates(db, actor.organisation_id, payload)

    reservation = Reservation(organisation_id=actor.organisation_id, **payload.model_dump())
    await _write(db, reservation)

    if reservation.status == CONFIRMED:
        await _on_confirmed(db, reservation)

    logger.info(
        "Created reservation %s on unit %s (%s -> %s, %s) by %s",
        reservation.id,
        reservation.unit_id,
        reservation.check_in_date,
        reservation.check_out_date,
        reservation.status,
        actor.id,
    )
    return ActionResult.ok("Reservation created", {"id": str(reservation.id)})


@admin_action
async def update_reservation(
    db: AsyncSession,
    actor: User,
    reservation_id: uuid.UUID,
    data: ReservationInput | dict[str, Any],
) -> ActionResult:
    """Replace a reservation's fields, applying the side effects of its status change.

    Moving into CONFIRMED fans out missions and records the ledger entry;
    moving into CANCELLED cancels pending missions and removes the entry.
    Changing the dates of a reservation that stays CONFIRMED leaves its
    existing missions where they are.
    """
    reservation = await _get_reservation(db, actor.organisation_id, reservation_id)
    previous = reservation.status

    payload = _parse_input(data)
    if payload.status not in ALLOWED_TRANSITIONS.get(previous, frozenset()):
        raise ValidationError(
            f"Cannot change a {previous} reservation to {payload.status}",
            {"status": f"Transition {previous} -> {payload.status} is not allowed"},
        )

    await _claim_dates(db, actor.organisation_id, payload, exclude_reservation_id=reservation.id)

    for field, value in payload.model_dump().items():
        setattr(reservation, field, value)
    await _write(db, reservation)

    if previous != CONFIRMED and reservation.status == CONFIRMED:
        await _on_confirmed(db, reservation)
    elif previous != CANCELLED and reservation.status == CANCELLED:
        await _on_cancelled(db, [reservation.id])

    logger.info("Updated reservation %s (%s -> %s) by %s", reservation.id, previous, reservation.status, actor.id)
    return ActionResult.ok("Reservation updated", {"id": str(reservation.id)})


@admin_action
async def terminate_reservation(db: AsyncSession, actor: User, reservation_id: uuid.UUID) -> ActionResult:
    """Mark a CONFIRMED reservation COMPLETED. Missions and ledger are untouched."""
    reservation = await _get_reservation(db, actor.organisation_id, reservation_id)
    if reservation.status != CONFIRMED:
        raise ValidationError(
            "Only confirmed reservations can be completed",
            {"status": f"Reservation is {reservation.status}"},
        )

    reservation.status = COMPLETED
    await db.flush()
    logger.info("Completed reservation %s by %s", reservation.id, actor.id)
    return ActionResult.ok("Reservation completed", {"id": str(reservation.id)})


@admin_action
async def delete_reservation(db: AsyncSession, actor: User, reservation_id: uuid.UUID) -> ActionResult:
    """Delete a reservation after cancelling its open missions and dropping its ledger entry."""
    reservation = await _get_reservation(db, actor.organisation_id, reservation_id)

    await cancel_dependent_missions(db, [reservation.id])
    await delete_ledger_entries(db, [reservation.id])
    await db.delete(reservation)
    await db.flush()

    logger.info("Deleted reservation %s by %s", reservation_id, actor.id)
    return ActionResult.ok("Reservation deleted", {"id": str(reservation_id)})


@admin_action
async def bulk_cancel_reservations(db: AsyncSession, actor: User, ids: Iterable[Any]) -> ActionResult:
    """Cancel the PENDING/CONFIRMED reservations among ``ids``.

    The count reported is that of the single UPDATE; mission cancellation and
    ledger cleanup run afterwards and are best-effort.
    """
    reservation_ids = _parse_ids(ids)

    result = await db.execute(
        update(Reservation)
        .where(
            Reservation.id.in_(reservation_ids),
            Reservation.organisation_id == actor.organisation_id,
            Reservation.status.in_(OCCUPYING_STATUSES),
        )
        .values(status=CANCELLED)
        .returning(Reservation.id)
    )
    cancelled_ids = list(result.scalars().all())
    logger.info("Bulk-cancelled %d of %d reservation(s) by %s", len(cancelled_ids), len(reservation_ids), actor.id)

    if cancelled_ids:
        await _run_secondary(db, "cancel missions", cancel_dependent_missions, cancelled_ids)
        await _run_secondary(db, "delete ledger entries", delete_ledger_entries, cancelled_ids)

    return ActionResult.ok(f"{len(cancelled_ids)} reservation(s) cancelled", {"count": len(cancelled_ids)})


@admin_action
async def bulk_delete_reservations(db: AsyncSession, actor: User, ids: Iterable[Any]) -> ActionResult:
    """Delete the reservations among ``ids``.

    Ledger rows go with them (``ON DELETE CASCADE``). Their missions survive
    detached and are cancelled afterwards unless already settled.
    """
    reservation_ids = _parse_ids(ids)

    mission_result = await db.execute(
        select(Mission.id)
        .join(Reservation, Mission.reservation_id == Reservation.id)
        .where(
            Reservation.id.in_(reservation_ids),
            Reservation.organisation_id == actor.organisation_id,
        )
    )
    mission_ids = list(mission_result.scalars().all())

    result = await db.execute(
        delete(Reservation)
        .where(
            Reservation.id.in_(reservation_ids),
            Reservation.organisation_id == actor.organisation_id,
        )
        .returning(Reservation.id)
    )
    deleted_ids = list(result.scalars().all())
    logger.info("Bulk-deleted %d of %d reservation(s) by %s", len(deleted_ids), len(reservation_ids), actor.id)

    if mission_ids:
        await _run_secondary(db, "cancel detached missions", cancel_missions_by_id, mission_ids)

    return ActionResult.ok(f"{len(deleted_ids)} reservation(s) deleted", {"count": len(deleted_ids)})


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_reservations(
    db: AsyncSession,
    organisation_id: uuid.UUID,
    unit_id: uuid.UUID | None = None,
    status: str | None = None,
    check_in_from: date | None = None,
    check_in_to: date | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Reservation], int]:
    """Return one page of the organisation's reservations and the total count."""
    filters = [Reservation.organisation_id == organisation_id]
    if unit_id is not None:
        filters.append(Reservation.unit_id == unit_id)
    if status is not None:
        filters.append(Reservation.status == status)
    if check_in_from is not None:
        filters.append(Reservation.check_in_date >= check_in_from)
    if check_in_to is not None:
        filters.append(Reservation.check_in_date <= check_in_to)

    total_result = await db.execute(select(func.count()).select_from(Reservation).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Reservation)
        .where(*filters)
        .order_by(Reservation.check_in_date.desc(), Reservation.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def get_reservation_detail(
    db: AsyncSession,
    organisation_id: uuid.UUID,
    reservation_id: uuid.UUID,
) -> tuple[Reservation, list[Mission], Revenue | None]:
    reservation = await _get_reservation(db, organisation_id, reservation_id)
    missions = await list_reservation_missions(db, reservation.id)
    revenue = await get_ledger_entry(db, reservation.id)
    return reservation, missions, revenue
