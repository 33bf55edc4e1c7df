"""Vessel reference-data router.

Endpoints:
    GET    /api/vessel/getAll          List vessels (id, name)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from voyage_planner.database import get_db
from voyage_planner.schemas.reference import VesselOut
from voyage_planner.services.voyages import list_vessels as load_vessels
from voyage_planner.utils.cache import cached

router = APIRouter()


@router.get("/getAll", response_model=list[VesselOut])
@cached(prefix="vessels")
async def list_vessels(
    db: AsyncSession = Depends(get_db),
):
    """List vessels by name."""
    return [VesselOut.model_validate(v) for v in await load_vessels(db)]
