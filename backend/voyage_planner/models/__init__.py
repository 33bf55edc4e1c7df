"""Aggregate model imports so every mapper is registered with Base.metadata."""

from voyage_planner.models.vessel import Vessel
from voyage_planner.models.unit_type import UnitType
from voyage_planner.models.voyage import Voyage, voyage_unit_types

__all__ = ["Vessel", "UnitType", "Voyage", "voyage_unit_types"]
