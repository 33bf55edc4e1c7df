"""Voyage persistence: create, list and delete voyages.

Route handlers stay thin; everything that touches the session lives here.
Unit types are linked by id only: an id with no matching UnitType row is a
persistence failure, never a reason to create a new row.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voyage_planner.middleware.exceptions import ResourceNotFoundError
from voyage_planner.models.unit_type import UnitType
from voyage_planner.models.vessel import Vessel
from voyage_planner.models.voyage import Voyage
from voyage_planner.schemas.voyage import VoyageCreate

logger = logging.getLogger(__name__)


async def create_voyage(db: AsyncSession, body: VoyageCreate) -> Voyage:
    """Insert a voyage and link its unit types.

    Raises:
        ResourceNotFoundError: If the vessel or any unit type id is unknown
        SQLAlchemyError: On any database failure during the flush
    """
    vessel = await db.get(Vessel, body.vessel)
    if vessel is None:
        raise ResourceNotFoundError("Vessel", body.vessel)

    result = await db.execute(
        select(UnitType).where(UnitType.id.in_(body.unit_types))
    )
    by_id = {unit_type.id: unit_type for unit_type in result.scalars().all()}
    missing = [uid for uid in body.unit_types if uid not in by_id]
    if missing:
        raise ResourceNotFoundError("UnitType", ", ".join(missing))

    now = datetime.now(timezone.utc)
    voyage = Voyage(
        id=str(uuid.uuid4()),
        scheduled_departure=body.departure_at,
        scheduled_arrival=body.arrival_at,
        port_of_loading=body.port_of_loading,
        port_of_discharge=body.port_of_discharge,
        vessel_id=vessel.id,
        created_at=now,
        updated_at=now,
    )
    voyage.vessel = vessel
    voyage.unit_types = [by_id[uid] for uid in body.unit_types]
    db.add(voyage)
    await db.flush()

    logger.info(
        f"Created voyage {voyage.id}: {voyage.port_of_loading} → "
        f"{voyage.port_of_discharge} on {vessel.name} "
        f"({len(voyage.unit_types)} unit types)"
    )
    return voyage


async def list_voyages(db: AsyncSession) -> list[Voyage]:
    """All voyages with vessel and unit types, sorted by departure ascending."""
    result = await db.execute(
        select(Voyage).order_by(Voyage.scheduled_departure.asc())
    )
    return list(result.scalars().all())


async def delete_voyage(db: AsyncSession, voyage_id: str) -> None:
    """Hard-delete a voyage; its unit-type links go with it.

    Raises:
        ResourceNotFoundError: If no voyage has this id
    """
    voyage = await db.get(Voyage, voyage_id)
    if voyage is None:
        raise ResourceNotFoundError("Voyage", voyage_id)

    await db.delete(voyage)
    await db.flush()
    logger.info(f"Deleted voyage {voyage_id}")


async def list_vessels(db: AsyncSession) -> list[Vessel]:
    result = await db.execute(select(Vessel).order_by(Vessel.name.asc()))
    return list(result.scalars().all())


async def list_unit_types(db: AsyncSession) -> list[UnitType]:
    result = await db.execute(select(UnitType).order_by(UnitType.name.asc()))
    return list(result.scalars().all())
