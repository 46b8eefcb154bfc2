"""Seed the database with a demo concierge organisation.

Creates one organisation with an admin, three units, an active contract per
unit, CLEANING checklists and a handful of reservations. Reservations go
through the orchestrator, so confirmed ones get their missions and revenue
exactly as they would through the API.

Run from the repository root:
    python -m scripts.seed_data
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import delete, select

from concierge.auth.jwt import create_access_token
from concierge.database import async_session_factory, engine
from concierge.models.checklist import ChecklistTemplate, ChecklistTemplateItem
from concierge.models.contract import Contract
from concierge.models.enums import ContractType, MissionType, UserRole
from concierge.models.organisation import Organisation
from concierge.models.unit import Unit
from concierge.models.user import User
from concierge.services.reservation_service import create_reservation

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ORGANISATION_NAME = "Riviera Conciergerie (demo)"

ADMIN = {"email": "admin@concierge.demo", "name": "Demo Admin"}

UNITS = [
    {
        "name": "Villa Les Pins",
        "address_line1": "12 chemin des Pins",
        "city": "Antibes",
        "max_guests": 8,
        "commission_rate": Decimal("20.00"),
        "contract_type": ContractType.EXCLUSIVE,
    },
    {
        "name": "Studio Port Vauban",
        "address_line1": "3 quai Henri Rambaud",
        "city": "Antibes",
        "max_guests": 2,
        "commission_rate": Decimal("15.00"),
        "contract_type": ContractType.SIMPLE,
    },
    {
        "name": "Appartement Vieux Nice",
        "address_line1": "8 rue Droite",
        "city": "Nice",
        "max_guests": 4,
        "commission_rate": Decimal("18.50"),
        "contract_type": ContractType.SIMPLE,
    },
]

CLEANING_STEPS = [
    ("Strip and remake all beds", "Bedrooms", False),
    ("Clean and restock bathrooms", "Bathrooms", False),
    ("Empty fridge and run dishwasher", "Kitchen", False),
    ("Photograph living room once done", "Living room", True),
    ("Check key box and welcome pack", "Entrance", False),
]

GUESTS = [
    ("Camille Martin", "AIRBNB", 2),
    ("Jonas Weber", "BOOKING", 4),
    ("Sofia Rossi", "DIRECT", 3),
    ("Liam O'Connor", "AIRBNB", 2),
]


def _build_reservations(units: list[Unit], today: date) -> list[dict]:
    """Two back-to-back stays per unit, the first confirmed, the second pending."""
    reservations = []
    for index, unit in enumerate(units):
        start = today + timedelta(days=3 + index)
        for turn, (guest_name, platform, guests) in enumerate(GUESTS[index % 2 :: 2]):
            nights = 4 + turn * 3
            check_in = start + timedelta(days=turn * 7)
            reservations.append(
                {
                    "unit_id": unit.id,
                    "guest_name": guest_name,
                    "guest_count": min(guests, unit.max_guests or guests),
                    "check_in_date": check_in,
                    "check_out_date": check_in + timedelta(days=nights),
                    "platform": platform,
                    "amount": Decimal("145.00") * nights,
                    "status": "CONFIRMED" if turn == 0 else "PENDING",
                }
            )
    return reservations


async def seed() -> None:
    """Populate the database with demo data. Re-running replaces the previous demo organisation."""
    async with async_session_factory() as session:
        existing = await session.scalar(select(Organisation).where(Organisation.name == ORGANISATION_NAME))
        if existing is not None:
            print(f"Demo organisation already exists ({existing.id}); deleting and re-seeding...")
            await session.execute(delete(Organisation).where(Organisation.id == existing.id))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Organisation and admin
        # ------------------------------------------------------------------
        organisation = Organisation(name=ORGANISATION_NAME)
        session.add(organisation)
        await session.flush()

        admin = User(
            organisation_id=organisation.id,
            email=ADMIN["email"],
            name=ADMIN["name"],
            role=UserRole.ADMIN.value,
            is_active=True,
        )
        session.add(admin)
        await session.flush()
        print(f"Created admin {admin.email} (id={admin.id})")

        # ------------------------------------------------------------------
        # 2. Units, contracts and checklists
        # ------------------------------------------------------------------
        today = date.today()
        units: list[Unit] = []
        for unit_data in UNITS:
            unit = Unit(
                organisation_id=organisation.id,
                name=unit_data["name"],
                address_line1=unit_data["address_line1"],
                city=unit_data["city"],
                max_guests=unit_data["max_guests"],
            )
            session.add(unit)
            await session.flush()
            units.append(unit)

            session.add(
                Contract(
                    organisation_id=organisation.id,
                    unit_id=unit.id,
                    type=unit_data["contract_type"].value,
                    commission_rate=unit_data["commission_rate"],
                    start_date=today.replace(month=1, day=1),
                    end_date=today.replace(month=12, day=31),
                )
            )

            template = ChecklistTemplate(
                organisation_id=organisation.id,
                unit_id=unit.id,
                mission_type=MissionType.CLEANING.value,
                name=f"Turnover cleaning: {unit.name}",
            )
            session.add(template)
            await session.flush()
            session.add_all(
                [
                    ChecklistTemplateItem(
                        template_id=template.id,
                        title=title,
                        category=category,
                        position=position,
                        photo_required=photo_required,
                    )
                    for position, (title, category, photo_required) in enumerate(CLEANING_STEPS, start=1)
                ]
            )
            await session.flush()
            print(f"   {unit.name} ({unit.city}), commission {unit_data['commission_rate']}%")

        # ------------------------------------------------------------------
        # 3. Reservations through the orchestrator
        # ------------------------------------------------------------------
        created = 0
        for payload in _build_reservations(units, today):
            result = await create_reservation(session, admin, payload)
            if result.success:
                created += 1
            else:
                print(f"   Skipped {payload['guest_name']}: {result.error}")

        await session.commit()

    await engine.dispose()

    print()
    print("=" * 60)
    print("Seed summary")
    print("=" * 60)
    print(f"   Units:        {len(units)}")
    print(f"   Reservations: {created}")
    print(f"   Admin token:  {create_access_token(str(admin.id))}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(seed())
