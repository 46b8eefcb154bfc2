"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test runs inside an outer transaction that rolls back afterwards.
- Orchestrator actions use SAVEPOINTs, so they never end that transaction.
- The test database `concierge_test` must exist before running tests.
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import date, datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from concierge.auth.jwt import create_access_token
from concierge.config import settings
from concierge.database import Base, ensure_extensions, get_db
from concierge.main import app
from concierge.models.checklist import ChecklistTemplate, ChecklistTemplateItem
from concierge.models.contract import Contract
from concierge.models.enums import MissionType, UserRole
from concierge.models.organisation import Organisation
from concierge.models.unit import Unit
from concierge.models.user import User

# ---------------------------------------------------------------------------
# Test database engine: same PG instance, `concierge_test` DB.
# ---------------------------------------------------------------------------

_base_url = settings.async_database_url
_test_db_url = _base_url.rsplit("/", 1)[0] + "/concierge_test"


def _make_engine():
    return create_async_engine(
        _test_db_url,
        echo=False,
        pool_pre_ping=True,
    )


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables (and the exclusion-constraint extension) once per session."""
    async with test_engine.begin() as conn:
        await ensure_extensions(conn)
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: organisation and staff
# ---------------------------------------------------------------------------


async def _create_user(db: AsyncSession, organisation: Organisation, role: UserRole, **kwargs) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        organisation_id=organisation.id,
        email=f"{role.value.lower()}-{unique}@test.com",
        name=f"Test {role.value.title()}",
        role=role.value,
        is_active=kwargs.pop("is_active", True),
        **kwargs,
    )
    db.add(user)
    await db.flush()
    return user


def _bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest_asyncio.fixture
async def organisation(db_session: AsyncSession) -> Organisation:
    org = Organisation(name="Riviera Conciergerie")
    db_session.add(org)
    await db_session.flush()
    return org


@pytest_asyncio.fixture
async def other_organisation(db_session: AsyncSession) -> Organisation:
    org = Organisation(name="Alpine Keys")
    db_session.add(org)
    await db_session.flush()
    return org


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession, organisation: Organisation) -> User:
    return await _create_user(db_session, organisation, UserRole.ADMIN)


@pytest_asyncio.fixture
async def manager_user(db_session: AsyncSession, organisation: Organisation) -> User:
    return await _create_user(db_session, organisation, UserRole.MANAGER)


@pytest_asyncio.fixture
async def outsider_admin(db_session: AsyncSession, other_organisation: Organisation) -> User:
    """An admin of a different organisation."""
    return await _create_user(db_session, other_organisation, UserRole.ADMIN)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return _bearer(admin_user)


@pytest_asyncio.fixture
async def manager_headers(manager_user: User) -> dict[str, str]:
    return _bearer(manager_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: units, contracts, checklists
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def unit(db_session: AsyncSession, organisation: Organisation) -> Unit:
    """The unit most scenarios book."""
    u = Unit(organisation_id=organisation.id, name="Villa Les Pins", city="Antibes", max_guests=6)
    db_session.add(u)
    await db_session.flush()
    return u


@pytest_asyncio.fixture
async def second_unit(db_session: AsyncSession, organisation: Organisation) -> Unit:
    u = Unit(organisation_id=organisation.id, name="Studio Port Vauban", city="Antibes", max_guests=2)
    db_session.add(u)
    await db_session.flush()
    return u


@pytest_asyncio.fixture
async def june_contract(db_session: AsyncSession, organisation: Organisation, unit: Unit) -> Contract:
    """15% commission on U1 for June 2024."""
    contract = Contract(
        organisation_id=organisation.id,
        unit_id=unit.id,
        commission_rate=Decimal("15.00"),
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 30),
    )
    db_session.add(contract)
    await db_session.flush()
    return contract


@pytest_asyncio.fixture
async def cleaning_template(db_session: AsyncSession, organisation: Organisation, unit: Unit) -> ChecklistTemplate:
    """Active CLEANING checklist for U1 with two steps."""
    template = ChecklistTemplate(
        organisation_id=organisation.id,
        unit_id=unit.id,
        mission_type=MissionType.CLEANING.value,
        name="Turnover cleaning",
        created_at=datetime(2024, 1, 1, 9, 0),
    )
    db_session.add(template)
    await db_session.flush()
    db_session.add_all(
        [
            ChecklistTemplateItem(template_id=template.id, title="Change bed linen", category="Bedroom", position=1),
            ChecklistTemplateItem(
                template_id=template.id,
                title="Photograph the kitchen",
                category="Kitchen",
                position=2,
                photo_required=True,
            ),
        ]
    )
    await db_session.flush()
    return template


def reservation_payload(unit: Unit, check_in: date, check_out: date, **overrides) -> dict:
    """Build a ReservationInput-shaped dict for ``unit``."""
    payload = {
        "unit_id": str(unit.id),
        "guest_name": "Camille Martin",
        "guest_email": "camille@example.com",
        "guest_count": 2,
        "check_in_date": check_in.isoformat(),
        "check_out_date": check_out.isoformat(),
        "platform": "AIRBNB",
        "status": "CONFIRMED",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload():
    """Expose :func:`reservation_payload` to test modules."""
    return reservation_payload
