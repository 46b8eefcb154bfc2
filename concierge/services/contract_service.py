"""Contract lookups used when pricing a confirmed reservation."""

import logging
import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.models.contract import Contract
from concierge.models.enums import ContractStatus

logger = logging.getLogger(__name__)


async def resolve_active_contract(
    db: AsyncSession,
    unit_id: uuid.UUID,
    on_date: date,
    organisation_id: uuid.UUID | None = None,
) -> Contract | None:
    """Return the contract in force for ``unit_id`` on ``on_date``.

    An ACTIVE contract whose inclusive ``[start_date, end_date]`` contains the
    date; the most recently created one wins. When the unit has none and an
    ``organisation_id`` is given, an organisation-wide contract (``unit_id``
    NULL) is tried with the same rules. ``None`` means no commission.
    """
    in_force = (
        Contract.status == ContractStatus.ACTIVE.value,
        Contract.start_date <= on_date,
        Contract.end_date >= on_date,
    )

    result = await db.execute(
        select(Contract)
        .where(Contract.unit_id == unit_id, *in_force)
        .order_by(Contract.created_at.desc(), Contract.id.desc())
        .limit(1)
    )
    contract = result.scalar_one_or_none()
    if contract is not None or organisation_id is None:
        return contract

    result = await db.execute(
        select(Contract)
        .where(Contract.organisation_id == organisation_id, Contract.unit_id.is_(None), *in_force)
        .order_by(Contract.created_at.desc(), Contract.id.desc())
        .limit(1)
    )
    contract = result.scalar_one_or_none()
    if contract is not None:
        logger.debug("Using organisation-wide contract %s for unit %s", contract.id, unit_id)
    return contract
