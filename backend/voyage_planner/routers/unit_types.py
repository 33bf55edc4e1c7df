"""Unit-type reference-data router.

Endpoints:
    GET    /api/unitType/getAll        List unit types (id, name, defaultLength)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from voyage_planner.database import get_db
from voyage_planner.schemas.reference import UnitTypeOut
from voyage_planner.services.voyages import list_unit_types as load_unit_types
from voyage_planner.utils.cache import cached

router = APIRouter()


@router.get("/getAll", response_model=list[UnitTypeOut])
@cached(prefix="unit_types")
async def list_unit_types(
    db: AsyncSession = Depends(get_db),
):
    return [UnitTypeOut.model_validate(u) for u in await load_unit_types(db)]
