"""Create-voyage form model.

A single ``VoyageDraft`` holds every field.  Plain inputs (departure,
arrival) and the selection widgets (vessel dropdown, port dropdown,
unit-type multi-select) all write to it directly, so validation and
submission always see the latest selection.

Submission runs IDLE → VALIDATING → SUBMITTING → SUCCEEDED | FAILED and
is exclusive: a ``submit()`` while one is validating or in flight is
ignored, and a draft that was created is never sent again.  A FAILED
form can be resubmitted.
"""

import enum
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from voyage_planner.client.api import ApiError, VoyageApiClient
from voyage_planner.client.notifications import NotificationCenter
from voyage_planner.client.query_cache import QueryCache
from voyage_planner.middleware.exceptions import VoyageValidationError
from voyage_planner.schemas.voyage import normalize_timestamp, validate_voyage_draft
from voyage_planner.services.port_pairing import PORTS, paired_port_of_discharge

logger = logging.getLogger(__name__)

UNIT_TYPE_REMOVE_KEYS = ("Delete", "Backspace")


class FormState(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Option:
    """A selectable item: ``value`` is the id sent to the API."""

    value: str
    label: str


@dataclass
class VoyageDraft:
    departure: str = ""
    arrival: str = ""
    port_of_loading: str = ""
    port_of_discharge: str = ""
    vessel: str = ""
    unit_types: list[Option] = field(default_factory=list)

    def unit_type_ids(self) -> list[str]:
        return [option.value for option in self.unit_types]

    def as_payload(self) -> dict[str, Any]:
        """The draft as a create request body, timestamps not yet normalized."""
        return {
            "departure": self.departure,
            "arrival": self.arrival,
            "portOfLoading": self.port_of_loading,
            "portOfDischarge": self.port_of_discharge,
            "vessel": self.vessel,
            "unitTypes": self.unit_type_ids(),
        }


class VoyageForm:
    """State and behaviour of the create-voyage form.

    Args:
        api: Client used for option lists and the create call
        cache: Shared query cache for the vessel / unit-type lists
        notifications: Where submission failures are announced
        on_success: Called once with no arguments after a successful create;
            a coroutine function is awaited
        tz_name: Zone for naive datetime-local input (default: settings)
    """

    def __init__(
        self,
        api: VoyageApiClient,
        cache: QueryCache,
        notifications: NotificationCenter,
        on_success: Callable[[], Awaitable[None] | None],
        tz_name: str | None = None,
    ):
        self.api = api
        self.cache = cache
        self.notifications = notifications
        self.on_success = on_success
        self.tz_name = tz_name

        self.draft = VoyageDraft()
        self.errors: dict[str, str] = {}
        self.state = FormState.IDLE
        self.created: dict | None = None

        self.port_options = [Option(value=port, label=port) for port in PORTS]
        self.vessel_options: list[Option] = []
        self.unit_type_options: list[Option] = []
        self.unit_type_filter = ""

    # ── Option loading ────────────────────────────────────────

    async def load_options(self) -> None:
        """Fetch vessels and unit types (through the cache) and apply defaults.

        A failed fetch is logged and leaves that option list empty.
        """
        try:
            vessels = await self.cache.get("vessels", lambda: self.api.fetch_data("vessel/getAll"))
            self.vessel_options = [Option(value=v["id"], label=v["name"]) for v in vessels]
        except ApiError as exc:
            logger.error(f"Error fetching vessels: {exc}")

        try:
            unit_types = await self.cache.get("unitTypes", lambda: self.api.fetch_data("unitType/getAll"))
            self.unit_type_options = [Option(value=u["id"], label=u["name"]) for u in unit_types]
        except ApiError as exc:
            logger.error(f"Error fetching unit types: {exc}")

        self.apply_defaults()

    def apply_defaults(self) -> None:
        """Dropdowns with nothing selected take their first option."""
        if not self.draft.vessel and self.vessel_options:
            self.select_vessel(self.vessel_options[0].value)
        if not self.draft.port_of_loading and self.port_options:
            self.select_port_of_loading(self.port_options[0].value)

    # ── Field edits ───────────────────────────────────────────

    def set_departure(self, value: str) -> None:
        self.draft.departure = value

    def set_arrival(self, value: str) -> None:
        self.draft.arrival = value

    def select_vessel(self, vessel_id: str) -> None:
        self.draft.vessel = vessel_id

    def select_port_of_loading(self, port: str) -> None:
        """Set the loading port; the discharge port follows the pairing rule."""
        self.draft.port_of_loading = port
        self.draft.port_of_discharge = paired_port_of_discharge(port)

    # ── Unit-type multi-select ────────────────────────────────

    def select_unit_type(self, option: Option) -> bool:
        """Append ``option`` unless already selected.  Returns True if added."""
        if any(s.value == option.value for s in self.draft.unit_types):
            return False
        self.draft.unit_types.append(option)
        self.unit_type_filter = ""
        return True

    def unselect_unit_type(self, value: str) -> None:
        self.draft.unit_types = [s for s in self.draft.unit_types if s.value != value]

    def set_unit_type_filter(self, text: str) -> None:
        self.unit_type_filter = text

    def handle_unit_type_key(self, key: str) -> None:
        """Delete/Backspace on an empty filter removes the last selection."""
        if key in UNIT_TYPE_REMOVE_KEYS:
            if self.unit_type_filter == "" and self.draft.unit_types:
                self.draft.unit_types.pop()
        elif key == "Escape":
            self.unit_type_filter = ""

    def filtered_unit_types(self) -> list[Option]:
        """Unselected options whose label contains the filter text."""
        needle = self.unit_type_filter.lower()
        selected = set(self.draft.unit_type_ids())
        return [
            option for option in self.unit_type_options
            if option.value not in selected and needle in option.label.lower()
        ]

    # ── Submission ────────────────────────────────────────────

    @property
    def is_busy(self) -> bool:
        return self.state in (FormState.VALIDATING, FormState.SUBMITTING)

    def validate(self) -> bool:
        """Run the voyage rules against the draft; errors land in ``self.errors``."""
        try:
            validate_voyage_draft(self.draft.as_payload(), self.tz_name)
        except VoyageValidationError as exc:
            self.errors = dict(exc.errors)
            return False
        self.errors = {}
        return True

    async def submit(self) -> bool:
        """Validate, normalize and send the draft.  Returns True on success.

        The draft is never cleared here; on failure it stays as typed so
        the user can correct it or simply retry.
        """
        if self.is_busy:
            logger.warning("Voyage submission already in progress; ignoring submit")
            return False
        if self.state == FormState.SUCCEEDED:
            logger.warning("Voyage already created from this form; ignoring submit")
            return False

        self.state = FormState.VALIDATING
        if not self.validate():
            self.state = FormState.IDLE
            return False

        payload = self.draft.as_payload()
        payload["departure"] = normalize_timestamp(self.draft.departure, self.tz_name)
        payload["arrival"] = normalize_timestamp(self.draft.arrival, self.tz_name)

        self.state = FormState.SUBMITTING
        try:
            self.created = await self.api.create_voyage(payload)
        except ApiError as exc:
            self.state = FormState.FAILED
            self.errors = exc.field_errors()
            logger.error(f"Error creating voyage: {exc}")
            self.notifications.toast(
                "Failed to create voyage", str(exc), variant="destructive"
            )
            return False

        self.state = FormState.SUCCEEDED
        result = self.on_success()
        if inspect.isawaitable(result):
            await result
        return True
