"""Ledger service: commission split and the once-per-reservation revenue entry."""

import logging
import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.models.contract import Contract
from concierge.models.reservation import Reservation
from concierge.models.revenue import Revenue

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class LedgerSplit:
    commission: Decimal
    net: Decimal


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a monetary input to Decimal without binary float drift."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_ledger(gross_amount: Decimal | int | float | str, commission_rate: Decimal | int | float | str) -> LedgerSplit:
    """Split a gross amount into commission and net.

    The commission is rounded half-up to the cent; the net is whatever
    remains, so ``commission + net == gross`` always holds.

    >>> compute_ledger("1000.00", 15)
    LedgerSplit(commission=Decimal('150.00'), net=Decimal('850.00'))
    """
    gross = to_decimal(gross_amount)
    rate = to_decimal(commission_rate)
    commission = (gross * rate / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
    net = (gross - commission).quantize(CENT, rounding=ROUND_HALF_UP)
    return LedgerSplit(commission=commission, net=net)


async def get_ledger_entry(db: AsyncSession, reservation_id: uuid.UUID) -> Revenue | None:
    result = await db.execute(select(Revenue).where(Revenue.reservation_id == reservation_id))
    return result.scalar_one_or_none()


async def record_ledger_entry(
    db: AsyncSession,
    reservation: Reservation,
    contract: Contract | None,
) -> Revenue | None:
    """Write the revenue row for a confirmed reservation, at most once.

    Returns the new row, or ``None`` when the reservation has no amount or
    already has a ledger entry. A missing contract means a 0% commission.
    """
    if reservation.amount is None:
        return None

    existing = await get_ledger_entry(db, reservation.id)
    if existing is not None:
        logger.info("Ledger entry already exists for reservation %s", reservation.id)
        return None

    rate = contract.commission_rate if contract is not None else Decimal("0")
    split = compute_ledger(reservation.amount, rate)
    revenue = Revenue(
        organisation_id=reservation.organisation_id,
        reservation_id=reservation.id,
        unit_id=reservation.unit_id,
        contract_id=contract.id if contract is not None else None,
        gross_amount=to_decimal(reservation.amount),
        commission_rate=to_decimal(rate),
        commission_amount=split.commission,
        net_amount=split.net,
        check_in_date=reservation.check_in_date,
        check_out_date=reservation.check_out_date,
    )
    db.add(revenue)
    await db.flush()

    logger.info(
        "Recorded ledger entry for reservation %s: gross=%s rate=%s commission=%s net=%s",
        reservation.id,
        revenue.gross_amount,
        rate,
        split.commission,
        split.net,
    )
    return revenue


async def delete_ledger_entries(db: AsyncSession, reservation_ids: list[uuid.UUID]) -> int:
    """Delete the revenue rows of the given reservations. Returns rows removed."""
    if not reservation_ids:
        return 0
    result = await db.execute(delete(Revenue).where(Revenue.reservation_id.in_(reservation_ids)))
    if result.rowcount:
        logger.info("Deleted %d ledger entr(ies) for %d reservation(s)", result.rowcount, len(reservation_ids))
    return result.rowcount
