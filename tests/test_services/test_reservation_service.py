"""Tests for the reservation orchestrator (create/update/terminate/delete/bulk)."""

import random
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.models.contract import Contract
from concierge.models.enums import MissionStatus
from concierge.models.mission import Mission
from concierge.models.reservation import Reservation
from concierge.models.revenue import Revenue
from concierge.models.unit import Unit
from concierge.models.user import User
from concierge.services import reservation_service
from concierge.services.errors import ErrorKind
from concierge.services.results import ActionResult


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _count(db: AsyncSession, model, *criteria) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*criteria))


async def _reload(db: AsyncSession, model, obj_id: uuid.UUID):
    result = await db.execute(
        select(model).where(model.id == obj_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _missions(db: AsyncSession, reservation_id: uuid.UUID) -> dict[str, Mission]:
    result = await db.execute(
        select(Mission)
        .where(Mission.reservation_id == reservation_id)
        .execution_options(populate_existing=True)
    )
    return {m.type: m for m in result.scalars().all()}


async def _create(db: AsyncSession, actor: User, payload: dict) -> uuid.UUID:
    result = await reservation_service.create_reservation(db, actor, payload)
    assert result.success, result
    return uuid.UUID(result.data["id"])


def _june_stay(make_payload, unit: Unit, **overrides) -> dict:
    return make_payload(unit, date(2024, 6, 1), date(2024, 6, 8), amount="700.00", **overrides)


# ---------------------------------------------------------------------------
# Admin gate
# ---------------------------------------------------------------------------


class TestAdminGate:
    """Only admins mutate reservations; the check runs before validation."""

    async def test_manager_refused_before_validation(self, db_session: AsyncSession, manager_user: User):
        result = await reservation_service.create_reservation(db_session, manager_user, {"guest_name": ""})

        assert result.success is False
        assert result.error_kind == ErrorKind.AUTHORIZATION
        assert result.field_errors == {}

    async def test_anonymous_refused(self, db_session: AsyncSession):
        result = await reservation_service.bulk_cancel_reservations(db_session, None, [])
        assert result.error_kind == ErrorKind.AUTHORIZATION

    async def test_every_mutation_is_gated(self, db_session: AsyncSession, manager_user: User):
        some_id = uuid.uuid4()
        results = [
            await reservation_service.update_reservation(db_session, manager_user, some_id, {}),
            await reservation_service.terminate_reservation(db_session, manager_user, some_id),
            await reservation_service.delete_reservation(db_session, manager_user, some_id),
            await reservation_service.bulk_delete_reservations(db_session, manager_user, [some_id]),
        ]
        assert all(r.error_kind == ErrorKind.AUTHORIZATION for r in results)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateReservation:
    async def test_confirmed_end_to_end(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        """Confirmed stay: three missions at the right times and a 15% ledger entry."""
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))

        missions = await _missions(db_session, reservation_id)
        assert missions["CHECKIN"].scheduled_at == datetime(2024, 6, 1, 15, 0)
        assert missions["CHECKOUT"].scheduled_at == datetime(2024, 6, 8, 11, 0)
        assert missions["CLEANING"].scheduled_at == datetime(2024, 6, 8, 13, 0)
        assert missions["CLEANING"].priority == "HIGH"

        revenue = await db_session.scalar(select(Revenue).where(Revenue.reservation_id == reservation_id))
        assert revenue.gross_amount == Decimal("700.00")
        assert revenue.commission_amount == Decimal("105.00")
        assert revenue.net_amount == Decimal("595.00")
        assert revenue.contract_id == june_contract.id

    async def test_overlap_rejected_without_writes(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        await _create(db_session, admin_user, _june_stay(make_payload, unit))
        before = await _count(db_session, Reservation, Reservation.unit_id == unit.id)

        result = await reservation_service.create_reservation(
            db_session,
            admin_user,
            make_payload(unit, date(2024, 6, 5), date(2024, 6, 10), guest_name="Second Guest"),
        )

        assert result.success is False
        assert result.error_kind == ErrorKind.OVERLAP
        assert await _count(db_session, Reservation, Reservation.unit_id == unit.id) == before
        assert await _count(db_session, Mission, Mission.unit_id == unit.id) == 3

    async def test_constraint_catches_what_the_check_misses(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))

        with patch.object(reservation_service, "has_overlap", AsyncMock(return_value=False)):
            result = await reservation_service.create_reservation(
                db_session, admin_user, make_payload(unit, date(2024, 6, 5), date(2024, 6, 10))
            )

        assert result.error_kind == ErrorKind.OVERLAP
        assert await _count(db_session, Reservation, Reservation.unit_id == unit.id) == 1

    async def test_back_to_back_allowed(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))
        await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 8), date(2024, 6, 12)))

    async def test_pending_has_no_side_effects(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit, status="PENDING"))

        assert await _missions(db_session, reservation_id) == {}
        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 0

    async def test_no_amount_no_ledger(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        reservation_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))

        assert len(await _missions(db_session, reservation_id)) == 3
        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 0

    async def test_no_contract_records_zero_commission(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))

        revenue = await db_session.scalar(select(Revenue).where(Revenue.reservation_id == reservation_id))
        assert revenue.commission_amount == Decimal("0.00")
        assert revenue.net_amount == Decimal("700.00")
        assert revenue.contract_id is None

    async def test_invalid_dates(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        result = await reservation_service.create_reservation(
            db_session, admin_user, make_payload(unit, date(2024, 6, 8), date(2024, 6, 8))
        )
        assert result.error_kind == ErrorKind.VALIDATION
        assert result.field_errors == {"check_out_date": "check_out_date must be after check_in_date"}

    async def test_field_errors_reported(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        result = await reservation_service.create_reservation(
            db_session,
            admin_user,
            make_payload(unit, date(2024, 6, 1), date(2024, 6, 3), guest_name="", guest_count=0),
        )
        assert result.error_kind == ErrorKind.VALIDATION
        assert {"guest_name", "guest_count"} <= set(result.field_errors)

    async def test_terminal_status_on_create_rejected(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        for status in ("CANCELLED", "COMPLETED"):
            result = await reservation_service.create_reservation(
                db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 3), status=status)
            )
            assert result.error_kind == ErrorKind.VALIDATION
            assert "status" in result.field_errors

    async def test_unit_of_other_organisation(
        self, db_session: AsyncSession, outsider_admin: User, unit: Unit, make_payload
    ):
        result = await reservation_service.create_reservation(
            db_session, outsider_admin, make_payload(unit, date(2024, 6, 1), date(2024, 6, 3))
        )
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert await _count(db_session, Reservation, Reservation.unit_id == unit.id) == 0

    async def test_database_error_becomes_infrastructure(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        with patch.object(
            reservation_service,
            "fan_out_missions",
            AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk full"))),
        ):
            result = await reservation_service.create_reservation(
                db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 3))
            )

        assert result.error_kind == ErrorKind.INFRASTRUCTURE
        assert await _count(db_session, Reservation, Reservation.unit_id == unit.id) == 0


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


class TestUpdateReservation:
    async def test_confirming_pending_fans_out_and_records_ledger(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit, status="PENDING"))

        result = await reservation_service.update_reservation(
            db_session, admin_user, reservation_id, _june_stay(make_payload, unit, status="CONFIRMED")
        )

        assert result.success
        assert len(await _missions(db_session, reservation_id)) == 3
        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 1

    async def test_ledger_written_once(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))

        for notes in ("Late arrival", "Baby cot"):
            result = await reservation_service.update_reservation(
                db_session, admin_user, reservation_id, _june_stay(make_payload, unit, notes=notes)
            )
            assert result.success

        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 1
        assert len(await _missions(db_session, reservation_id)) == 3

    async def test_cancel_cascades_to_missions_and_ledger(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))
        missions = await _missions(db_session, reservation_id)
        missions["CLEANING"].status = MissionStatus.DONE.value
        await db_session.flush()

        result = await reservation_service.update_reservation(
            db_session, admin_user, reservation_id, _june_stay(make_payload, unit, status="CANCELLED")
        )

        assert result.success
        missions = await _missions(db_session, reservation_id)
        assert missions["CLEANING"].status == "DONE"
        assert missions["CHECKOUT"].status == "CANCELLED"
        assert missions["CHECKIN"].status == "CANCELLED"
        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 0

    async def test_cancelled_frees_the_dates(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))
        await reservation_service.update_reservation(
            db_session, admin_user, reservation_id, _june_stay(make_payload, unit, status="CANCELLED")
        )

        await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 3), date(2024, 6, 6)))

    async def test_moving_onto_another_stay_is_an_overlap(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))
        second_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 10), date(2024, 6, 12)))

        result = await reservation_service.update_reservation(
            db_session, admin_user, second_id, make_payload(unit, date(2024, 6, 6), date(2024, 6, 12))
        )

        assert result.error_kind == ErrorKind.OVERLAP
        second = await _reload(db_session, Reservation, second_id)
        assert second.check_in_date == date(2024, 6, 10)

    async def test_own_dates_do_not_conflict(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))

        result = await reservation_service.update_reservation(
            db_session, admin_user, reservation_id, make_payload(unit, date(2024, 6, 2), date(2024, 6, 9))
        )
        assert result.success

    async def test_date_change_keeps_existing_missions(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))

        await reservation_service.update_reservation(
            db_session, admin_user, reservation_id, make_payload(unit, date(2024, 6, 2), date(2024, 6, 9))
        )

        missions = await _missions(db_session, reservation_id)
        assert missions["CHECKIN"].scheduled_at == datetime(2024, 6, 1, 15, 0)

    async def test_forbidden_transitions(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        confirmed_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))
        cancelled_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 7, 1), date(2024, 7, 8)))
        await reservation_service.update_reservation(
            db_session, admin_user, cancelled_id, make_payload(unit, date(2024, 7, 1), date(2024, 7, 8), status="CANCELLED")
        )

        attempts = [
            (confirmed_id, date(2024, 6, 1), date(2024, 6, 8), "PENDING"),
            (confirmed_id, date(2024, 6, 1), date(2024, 6, 8), "COMPLETED"),
            (cancelled_id, date(2024, 7, 1), date(2024, 7, 8), "CONFIRMED"),
            (cancelled_id, date(2024, 7, 1), date(2024, 7, 8), "PENDING"),
        ]
        for reservation_id, check_in, check_out, status in attempts:
            result = await reservation_service.update_reservation(
                db_session, admin_user, reservation_id, make_payload(unit, check_in, check_out, status=status)
            )
            assert result.error_kind == ErrorKind.VALIDATION, status
            assert "status" in result.field_errors

    async def test_missing_reservation(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        result = await reservation_service.update_reservation(
            db_session, admin_user, uuid.uuid4(), make_payload(unit, date(2024, 6, 1), date(2024, 6, 8))
        )
        assert result.error_kind == ErrorKind.NOT_FOUND


# ---------------------------------------------------------------------------
# Overlap on random intervals
# ---------------------------------------------------------------------------


class TestOverlapAgainstRandomIntervals:
    """Random stay pairs: the second write fails with OVERLAP exactly when the stays intersect."""

    SEED = 20240601
    TRIALS = 40

    @staticmethod
    def _interval(rng: random.Random, window: date) -> tuple[date, date]:
        start = window + timedelta(days=rng.randint(0, 20))
        return start, start + timedelta(days=rng.randint(1, 8))

    def _pairs(self):
        rng = random.Random(self.SEED)
        for trial in range(self.TRIALS):
            # Each trial gets its own 60-day window so earlier trials never interfere
            window = date(2030, 1, 1) + timedelta(days=60 * trial)
            first = self._interval(rng, window)
            second = self._interval(rng, window)
            intersects = first[0] < second[1] and second[0] < first[1]
            yield window, first, second, intersects

    async def test_create(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        for _, first, second, intersects in self._pairs():
            await _create(db_session, admin_user, make_payload(unit, *first, status="PENDING"))

            result = await reservation_service.create_reservation(
                db_session, admin_user, make_payload(unit, *second, status="PENDING")
            )

            if intersects:
                assert result.error_kind == ErrorKind.OVERLAP, (first, second)
            else:
                assert result.success, (first, second, result)

    async def test_update(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        for window, first, second, intersects in self._pairs():
            await _create(db_session, admin_user, make_payload(unit, *first, status="PENDING"))
            parked_at = window + timedelta(days=40)
            moving_id = await _create(
                db_session, admin_user, make_payload(unit, parked_at, parked_at + timedelta(days=2), status="PENDING")
            )

            result = await reservation_service.update_reservation(
                db_session, admin_user, moving_id, make_payload(unit, *second, status="PENDING")
            )

            if intersects:
                assert result.error_kind == ErrorKind.OVERLAP, (first, second)
            else:
                assert result.success, (first, second, result)


# ---------------------------------------------------------------------------
# Terminate / delete
# ---------------------------------------------------------------------------


class TestTerminateReservation:
    async def test_confirmed_becomes_completed(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))

        result = await reservation_service.terminate_reservation(db_session, admin_user, reservation_id)

        assert result.success
        reservation = await _reload(db_session, Reservation, reservation_id)
        assert reservation.status == "COMPLETED"
        # No cascades
        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 1
        assert all(m.status == "TODO" for m in (await _missions(db_session, reservation_id)).values())

    async def test_pending_cannot_be_completed(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(
            db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8), status="PENDING")
        )

        result = await reservation_service.terminate_reservation(db_session, admin_user, reservation_id)
        assert result.error_kind == ErrorKind.VALIDATION

    async def test_completed_is_final(self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload):
        reservation_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))
        await reservation_service.terminate_reservation(db_session, admin_user, reservation_id)

        again = await reservation_service.terminate_reservation(db_session, admin_user, reservation_id)
        cancel = await reservation_service.update_reservation(
            db_session, admin_user, reservation_id, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8), status="CANCELLED")
        )
        assert again.error_kind == ErrorKind.VALIDATION
        assert cancel.error_kind == ErrorKind.VALIDATION


class TestDeleteReservation:
    async def test_delete_cancels_missions_and_drops_ledger(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))
        mission_ids = [m.id for m in (await _missions(db_session, reservation_id)).values()]

        result = await reservation_service.delete_reservation(db_session, admin_user, reservation_id)

        assert result.success
        assert await _reload(db_session, Reservation, reservation_id) is None
        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 0
        for mission_id in mission_ids:
            mission = await _reload(db_session, Mission, mission_id)
            assert mission.status == "CANCELLED"
            assert mission.reservation_id is None

    async def test_delete_missing(self, db_session: AsyncSession, admin_user: User):
        result = await reservation_service.delete_reservation(db_session, admin_user, uuid.uuid4())
        assert result.error_kind == ErrorKind.NOT_FOUND

    async def test_other_organisation_cannot_delete(
        self, db_session: AsyncSession, admin_user: User, outsider_admin: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))

        result = await reservation_service.delete_reservation(db_session, outsider_admin, reservation_id)

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert await _reload(db_session, Reservation, reservation_id) is not None


# ---------------------------------------------------------------------------
# Bulk actions
# ---------------------------------------------------------------------------


class TestBulkActions:
    async def test_bounds_checked_before_any_query(self, db_session: AsyncSession, admin_user: User):
        spy = AsyncMock()
        with patch.object(db_session, "execute", spy):
            too_few = await reservation_service.bulk_cancel_reservations(db_session, admin_user, [])
            too_many = await reservation_service.bulk_delete_reservations(
                db_session, admin_user, [uuid.uuid4() for _ in range(101)]
            )
            malformed = await reservation_service.bulk_cancel_reservations(db_session, admin_user, ["not-a-uuid"])

        for result in (too_few, too_many, malformed):
            assert result.success is False
            assert result.error_kind == ErrorKind.VALIDATION
        spy.assert_not_awaited()

    async def test_bulk_cancel(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        first = await _create(db_session, admin_user, _june_stay(make_payload, unit))
        second = await _create(
            db_session, admin_user, make_payload(unit, date(2024, 6, 10), date(2024, 6, 12), status="PENDING")
        )
        completed = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 20), date(2024, 6, 22)))
        await reservation_service.terminate_reservation(db_session, admin_user, completed)

        result = await reservation_service.bulk_cancel_reservations(
            db_session, admin_user, [str(first), str(second), str(completed), str(uuid.uuid4())]
        )

        assert result.success
        assert result.data == {"count": 2}
        assert (await _reload(db_session, Reservation, first)).status == "CANCELLED"
        assert (await _reload(db_session, Reservation, completed)).status == "COMPLETED"
        assert all(m.status == "CANCELLED" for m in (await _missions(db_session, first)).values())
        assert await _count(db_session, Revenue, Revenue.reservation_id == first) == 0

    async def test_bulk_cancel_secondary_failure_still_succeeds(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, _june_stay(make_payload, unit))

        with patch.object(
            reservation_service,
            "cancel_dependent_missions",
            AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("lock timeout"))),
        ):
            result = await reservation_service.bulk_cancel_reservations(db_session, admin_user, [reservation_id])

        assert result.success
        assert result.data == {"count": 1}
        assert (await _reload(db_session, Reservation, reservation_id)).status == "CANCELLED"
        # The ledger cleanup step still ran
        assert await _count(db_session, Revenue, Revenue.reservation_id == reservation_id) == 0

    async def test_bulk_cancel_scoped_to_organisation(
        self, db_session: AsyncSession, admin_user: User, outsider_admin: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))

        result = await reservation_service.bulk_cancel_reservations(db_session, outsider_admin, [reservation_id])

        assert result.data == {"count": 0}
        assert (await _reload(db_session, Reservation, reservation_id)).status == "CONFIRMED"

    async def test_bulk_delete(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, june_contract: Contract, make_payload
    ):
        first = await _create(db_session, admin_user, _june_stay(make_payload, unit))
        second = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 10), date(2024, 6, 12)))
        missions = await _missions(db_session, first)
        missions["CHECKIN"].status = MissionStatus.DONE.value
        await db_session.flush()
        mission_ids = {m.type: m.id for m in missions.values()}

        result = await reservation_service.bulk_delete_reservations(db_session, admin_user, [first, second])

        assert result.success
        assert result.data == {"count": 2}
        assert await _count(db_session, Reservation, Reservation.id.in_([first, second])) == 0
        assert await _count(db_session, Revenue, Revenue.reservation_id == first) == 0
        assert (await _reload(db_session, Mission, mission_ids["CHECKIN"])).status == "DONE"
        detached = await _reload(db_session, Mission, mission_ids["CLEANING"])
        assert detached.status == "CANCELLED"
        assert detached.reservation_id is None

    async def test_duplicate_ids_counted_once(
        self, db_session: AsyncSession, admin_user: User, unit: Unit, make_payload
    ):
        reservation_id = await _create(db_session, admin_user, make_payload(unit, date(2024, 6, 1), date(2024, 6, 8)))

        result = await reservation_service.bulk_delete_reservations(
            db_session, admin_user, [reservation_id, str(reservation_id)]
        )
        assert result.data == {"count": 1}


def test_action_result_envelope():
    result = ActionResult.ok("Reservation created", {"id": "abc"})
    assert result.success and result.error is None and result.field_errors == {}
