"""Voyage list screen: table rows, create sheet, and delete action.

The screen owns the "voyages" entry of the query cache.  A successful
create or delete invalidates it and re-fetches the list straight away.
"""

import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from voyage_planner.client.api import ApiError, VoyageApiClient
from voyage_planner.client.form import VoyageForm
from voyage_planner.client.notifications import NotificationCenter
from voyage_planner.client.query_cache import QueryCache
from voyage_planner.config import settings
from voyage_planner.schemas.voyage import parse_timestamp

logger = logging.getLogger(__name__)

TABLE_DATE_FORMAT = "%d/%m/%Y %H:%M"

VOYAGES_KEY = "voyages"


@dataclass(frozen=True)
class UnitTypeRow:
    name: str
    default_length: float


@dataclass(frozen=True)
class VoyageRow:
    id: str
    departure: str
    arrival: str
    port_of_loading: str
    port_of_discharge: str
    vessel: str
    unit_type_count: int
    unit_types: tuple[UnitTypeRow, ...]


def format_table_date(value: str, tz_name: str | None = None) -> str:
    parsed = parse_timestamp(value, "UTC")
    if parsed is None:
        return value
    local = parsed.astimezone(ZoneInfo(tz_name or settings.form_timezone))
    return local.strftime(TABLE_DATE_FORMAT)


class VoyageListScreen:
    def __init__(
        self,
        api: VoyageApiClient,
        cache: QueryCache,
        notifications: NotificationCenter | None = None,
        tz_name: str | None = None,
    ):
        self.api = api
        self.cache = cache
        self.notifications = notifications or NotificationCenter()
        self.tz_name = tz_name
        self.is_sheet_open = False
        self.form: VoyageForm | None = None
        self.voyages: list[dict] = []

    async def load(self) -> list[dict]:
        self.voyages = await self.cache.get(
            VOYAGES_KEY, lambda: self.api.fetch_data("voyage/getAll")
        )
        return self.voyages

    def rows(self) -> list[VoyageRow]:
        return [
            VoyageRow(
                id=v["id"],
                departure=format_table_date(v["scheduledDeparture"], self.tz_name),
                arrival=format_table_date(v["scheduledArrival"], self.tz_name),
                port_of_loading=v["portOfLoading"],
                port_of_discharge=v["portOfDischarge"],
                vessel=v["vessel"]["name"],
                unit_type_count=len(v["unitTypes"]),
                unit_types=tuple(
                    UnitTypeRow(name=u["name"], default_length=u["defaultLength"])
                    for u in v["unitTypes"]
                ),
            )
            for v in self.voyages
        ]

    # ── Create sheet ──────────────────────────────────────────

    def open_create_sheet(self) -> VoyageForm:
        """Open the sheet with a fresh, empty form."""
        self.is_sheet_open = True
        self.form = VoyageForm(
            self.api,
            self.cache,
            self.notifications,
            on_success=self.handle_create_success,
            tz_name=self.tz_name,
        )
        return self.form

    def close_create_sheet(self) -> None:
        self.is_sheet_open = False
        self.form = None

    async def handle_create_success(self) -> None:
        """Announce the new voyage, close the sheet and re-fetch the list."""
        self.notifications.toast(
            "Voyage created successfully!",
            "The new voyage has been added to the list.",
        )
        self.close_create_sheet()
        self.cache.invalidate(VOYAGES_KEY)
        try:
            await self.load()
        except ApiError as exc:
            logger.error(f"Error refreshing voyages: {exc}")

    # ── Delete ────────────────────────────────────────────────

    async def delete(self, voyage_id: str) -> bool:
        """Delete a voyage and re-fetch the list.  Returns False on failure."""
        try:
            await self.api.delete_voyage(voyage_id)
        except ApiError as exc:
            logger.error(f"Error deleting voyage: {exc}")
            self.notifications.toast(
                "Failed to delete voyage", str(exc), variant="destructive"
            )
            return False

        self.cache.invalidate(VOYAGES_KEY)
        await self.load()
        return True
