"""Pydantic schemas for voyage creation and listing.

``VoyageCreate`` is the one rule set for a voyage draft.  The browser-side
form model and the create endpoint both run it through
``validate_voyage_draft`` so the same messages come back either way:

    {"portOfLoading": "Port of loading is required",
     "arrival": "Arrival date must be after departure date"}

Keys are the camelCase wire names of the request body.
"""

from datetime import datetime, timezone
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from voyage_planner.config import settings
from voyage_planner.middleware.exceptions import VoyageValidationError
from voyage_planner.schemas.reference import UnitTypeOut, VesselOut

REQUIRED_MESSAGES = {
    "departure": "Departure is required",
    "arrival": "Arrival is required",
    "port_of_loading": "Port of loading is required",
    "port_of_discharge": "Port of discharge is required",
    "vessel": "Vessel is required",
}
UNIT_TYPES_REQUIRED_MESSAGE = "At least one unit type is required"
ARRIVAL_ORDER_MESSAGE = "Arrival date must be after departure date"


# ── Timestamp helpers ─────────────────────────────────────────

def parse_timestamp(value: Any, tz_name: str | None = None) -> datetime | None:
    """Parse an ISO-8601 / datetime-local string into an aware datetime.

    Naive values (``2025-01-01T10:00`` from a datetime-local input) are
    read in ``tz_name`` (default: ``settings.form_timezone``).  Returns
    None for anything that is not a parsable string.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo(tz_name or settings.form_timezone))
    return parsed


def normalize_timestamp(value: str, tz_name: str | None = None) -> str:
    """Return the canonical absolute form, e.g. ``2025-01-01T10:00:00.000Z``.

    Raises:
        ValueError: If the value cannot be parsed
    """
    parsed = parse_timestamp(value, tz_name)
    if parsed is None:
        raise ValueError(f"Invalid timestamp: {value!r}")
    utc = parsed.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def check_schedule_order(
    departure: Any, arrival: Any, tz_name: str | None = None
) -> str | None:
    """Return the arrival-ordering message unless arrival is strictly later.

    Both values are compared as UTC instants, so wall-clock times around a
    DST change are ordered the way they will be sent.  An unparsable
    departure or arrival counts as out of order.
    """
    departure_at = parse_timestamp(departure, tz_name)
    arrival_at = parse_timestamp(arrival, tz_name)
    if departure_at is None or arrival_at is None:
        return ARRIVAL_ORDER_MESSAGE
    if not arrival_at.astimezone(timezone.utc) > departure_at.astimezone(timezone.utc):
        return ARRIVAL_ORDER_MESSAGE
    return None


# ── Create ────────────────────────────────────────────────────

class VoyageCreate(BaseModel):
    departure: str = ""
    arrival: str = ""
    port_of_loading: str = ""
    port_of_discharge: str = ""
    vessel: str = ""
    unit_types: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )

    @field_validator(
        "departure", "arrival", "port_of_loading", "port_of_discharge", "vessel",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator(
        "departure", "arrival", "port_of_loading", "port_of_discharge", "vessel",
    )
    @classmethod
    def _required(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise PydanticCustomError("required", REQUIRED_MESSAGES[info.field_name])
        return value

    @field_validator("unit_types", mode="before")
    @classmethod
    def _unit_types_none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("unit_types")
    @classmethod
    def _at_least_one_unit_type(cls, value: list[str]) -> list[str]:
        unique = list(dict.fromkeys(v for v in value if v))
        if not unique:
            raise PydanticCustomError("too_short", UNIT_TYPES_REQUIRED_MESSAGE)
        return unique

    @model_validator(mode="after")
    def _arrival_after_departure(self, info: ValidationInfo) -> "VoyageCreate":
        tz_name = (info.context or {}).get("tz_name")
        message = check_schedule_order(self.departure, self.arrival, tz_name)
        if message:
            raise PydanticCustomError("schedule_order", message)
        return self

    @property
    def departure_at(self) -> datetime | None:
        return parse_timestamp(self.departure)

    @property
    def arrival_at(self) -> datetime | None:
        return parse_timestamp(self.arrival)


_WIRE_NAMES = {name: field.alias or name for name, field in VoyageCreate.model_fields.items()}


def validate_voyage_draft(data: Any, tz_name: str | None = None) -> VoyageCreate:
    """Validate a voyage draft (camelCase or snake_case keys).

    Every field is checked independently and the arrival-ordering rule
    is always evaluated, so one call reports every problem at once.  A
    ``required`` error already on arrival wins over the ordering error.
    Anything that is not a mapping is treated as an empty draft.

    Args:
        data: Request body or form payload
        tz_name: Zone for naive datetime-local values (default: settings)

    Raises:
        VoyageValidationError: With the complete field-keyed error map
    """
    if not isinstance(data, Mapping):
        data = {}
    try:
        return VoyageCreate.model_validate(data, context={"tz_name": tz_name})
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for error in exc.errors():
            if not error["loc"]:
                continue  # model-level ordering error, re-derived below
            key = str(error["loc"][0])
            errors.setdefault(_WIRE_NAMES.get(key, key), error["msg"])

    if "arrival" not in errors:
        message = check_schedule_order(
            data.get("departure"), data.get("arrival"), tz_name
        )
        if message:
            errors["arrival"] = message

    raise VoyageValidationError(errors)


# ── Response ──────────────────────────────────────────────────

class VoyageRead(BaseModel):
    id: str
    scheduled_departure: datetime
    scheduled_arrival: datetime
    port_of_loading: str
    port_of_discharge: str
    vessel_id: str
    unit_types: list[UnitTypeOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ── Response (list, includes vessel name) ───────────────────

class VoyageListItem(VoyageRead):
    vessel: VesselOut
