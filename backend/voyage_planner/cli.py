"""Management CLI for database setup and inspection.

Usage:
    python -m voyage_planner.cli init-db        # Create all tables
    python -m voyage_planner.cli seed           # Insert reference vessels / unit types
    python -m voyage_planner.cli list-voyages   # Print scheduled voyages
"""

import asyncio
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voyage_planner.database import async_session, create_tables
from voyage_planner.models.unit_type import UnitType
from voyage_planner.models.vessel import Vessel
from voyage_planner.services.voyages import list_voyages

SEED_VESSELS = ["Crown Seaways", "Pearl Seaways"]

# name → default length in metres
SEED_UNIT_TYPES = {
    "Car": 4.5,
    "Van": 6.0,
    "Truck": 12.0,
    "Trailer": 13.6,
}


async def seed_reference_data(db: AsyncSession) -> tuple[int, int]:
    """Insert missing seed vessels and unit types; returns (vessels, unit types) added."""
    existing = await db.execute(select(Vessel.name))
    vessel_names = {row[0] for row in existing.all()}
    new_vessels = [Vessel(name=name) for name in SEED_VESSELS if name not in vessel_names]

    existing = await db.execute(select(UnitType.name))
    unit_type_names = {row[0] for row in existing.all()}
    new_unit_types = [
        UnitType(name=name, default_length=length)
        for name, length in SEED_UNIT_TYPES.items()
        if name not in unit_type_names
    ]

    db.add_all(new_vessels + new_unit_types)
    await db.flush()
    return len(new_vessels), len(new_unit_types)


async def init_db():
    await create_tables()
    print("Tables created.")


async def seed():
    async with async_session() as db:
        vessels, unit_types = await seed_reference_data(db)
        await db.commit()
    print(f"Added {vessels} vessel(s) and {unit_types} unit type(s).")


async def print_voyages():
    async with async_session() as db:
        voyages = await list_voyages(db)
    for v in voyages:
        units = ", ".join(u.name for u in v.unit_types)
        print(
            f"  {v.scheduled_departure:%d/%m/%Y %H:%M} → {v.scheduled_arrival:%d/%m/%Y %H:%M}"
            f"  {v.port_of_loading} → {v.port_of_discharge}  {v.vessel.name}  [{units}]"
        )
    print(f"\n{len(voyages)} voyage(s)")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "init-db":
        asyncio.run(init_db())
    elif cmd == "seed":
        asyncio.run(seed())
    elif cmd == "list-voyages":
        asyncio.run(print_voyages())
    else:
        print("Usage: python -m voyage_planner.cli [init-db|seed|list-voyages]")
