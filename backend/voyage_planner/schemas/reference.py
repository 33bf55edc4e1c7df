"""Read-only schemas for vessel and unit-type reference data."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class VesselOut(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class UnitTypeOut(BaseModel):
    id: str
    name: str
    default_length: float

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )
