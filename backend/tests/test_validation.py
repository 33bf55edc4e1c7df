"""Voyage draft validation rules."""

import pytest

from voyage_planner.middleware.exceptions import VoyageValidationError
from voyage_planner.schemas.voyage import (
    ARRIVAL_ORDER_MESSAGE,
    VoyageCreate,
    check_schedule_order,
    normalize_timestamp,
    parse_timestamp,
    validate_voyage_draft,
)


def _errors(data: dict) -> dict[str, str]:
    with pytest.raises(VoyageValidationError) as exc_info:
        validate_voyage_draft(data)
    return exc_info.value.errors


@pytest.mark.unit
class TestRequiredFields:

    def test_valid_draft_returns_typed_record(self, valid_payload):
        record = validate_voyage_draft(valid_payload)
        assert isinstance(record, VoyageCreate)
        assert record.port_of_loading == "Copenhagen"
        assert record.port_of_discharge == "Oslo"
        assert record.vessel == "v1"
        assert record.unit_types == ["u1", "u2"]
        assert record.departure_at is not None and record.arrival_at is not None
        assert record.arrival_at > record.departure_at

    def test_snake_case_keys_are_accepted(self, valid_payload):
        record = validate_voyage_draft({
            "departure": valid_payload["departure"],
            "arrival": valid_payload["arrival"],
            "port_of_loading": "Oslo",
            "port_of_discharge": "Copenhagen",
            "vessel": "v2",
            "unit_types": ["u3"],
        })
        assert record.port_of_loading == "Oslo"

    @pytest.mark.parametrize("field, message", [
        ("departure", "Departure is required"),
        ("arrival", "Arrival is required"),
        ("portOfLoading", "Port of loading is required"),
        ("portOfDischarge", "Port of discharge is required"),
        ("vessel", "Vessel is required"),
    ])
    def test_empty_scalar_field(self, valid_payload, field, message):
        errors = _errors({**valid_payload, field: ""})
        assert errors[field] == message

    def test_missing_and_none_count_as_empty(self, valid_payload):
        data = dict(valid_payload)
        del data["vessel"]
        data["portOfLoading"] = None
        errors = _errors(data)
        assert errors["vessel"] == "Vessel is required"
        assert errors["portOfLoading"] == "Port of loading is required"

    def test_empty_unit_types(self, valid_payload):
        errors = _errors({**valid_payload, "unitTypes": []})
        assert errors == {"unitTypes": "At least one unit type is required"}

    def test_every_violation_reported_at_once(self):
        errors = _errors({})
        assert errors == {
            "departure": "Departure is required",
            "arrival": "Arrival is required",
            "portOfLoading": "Port of loading is required",
            "portOfDischarge": "Port of discharge is required",
            "vessel": "Vessel is required",
            "unitTypes": "At least one unit type is required",
        }

    def test_duplicate_unit_types_collapse_in_order(self, valid_payload):
        record = validate_voyage_draft({**valid_payload, "unitTypes": ["u2", "u1", "u2"]})
        assert record.unit_types == ["u2", "u1"]


@pytest.mark.unit
class TestArrivalAfterDeparture:

    @pytest.mark.parametrize("departure, arrival", [
        ("2025-01-02T10:00", "2025-01-01T10:00"),   # arrival before
        ("2025-01-01T10:00", "2025-01-01T10:00"),   # equal
        ("2025-01-01T10:00:00.000Z", "2025-01-01T09:59:59.999Z"),
    ])
    def test_not_strictly_later_fails_on_arrival(self, valid_payload, departure, arrival):
        errors = _errors({**valid_payload, "departure": departure, "arrival": arrival})
        assert errors == {"arrival": ARRIVAL_ORDER_MESSAGE}

    def test_reported_alongside_other_field_errors(self, valid_payload):
        errors = _errors({
            **valid_payload,
            "departure": "2025-01-02T10:00",
            "arrival": "2025-01-01T10:00",
            "vessel": "",
            "unitTypes": [],
        })
        assert errors["arrival"] == ARRIVAL_ORDER_MESSAGE
        assert errors["vessel"] == "Vessel is required"
        assert errors["unitTypes"] == "At least one unit type is required"

    def test_required_message_wins_on_empty_arrival(self, valid_payload):
        errors = _errors({**valid_payload, "arrival": ""})
        assert errors["arrival"] == "Arrival is required"

    def test_unparsable_timestamp_is_out_of_order(self, valid_payload):
        errors = _errors({**valid_payload, "arrival": "next tuesday"})
        assert errors["arrival"] == ARRIVAL_ORDER_MESSAGE

    def test_offsets_are_compared_as_instants(self, valid_payload):
        # 10:30+01:00 is 09:30Z, which is before 10:00Z
        errors = _errors({
            **valid_payload,
            "departure": "2025-01-01T10:00:00Z",
            "arrival": "2025-01-01T10:30:00+01:00",
        })
        assert errors["arrival"] == ARRIVAL_ORDER_MESSAGE

    def test_check_schedule_order(self):
        assert check_schedule_order("2025-01-01T10:00", "2025-01-01T10:01") is None
        assert check_schedule_order("2025-01-01T10:01", "2025-01-01T10:00") == ARRIVAL_ORDER_MESSAGE
        assert check_schedule_order(None, "2025-01-01T10:00") == ARRIVAL_ORDER_MESSAGE

    def test_wall_clock_in_dst_gap_is_ordered_by_instant(self, valid_payload):
        # In Copenhagen 02:30 on 2025-03-30 falls in the spring-forward gap
        # and resolves to 01:30Z, after 03:10 local (01:10Z).
        departure, arrival = "2025-03-30T02:30", "2025-03-30T03:10"

        assert check_schedule_order(departure, arrival, "UTC") is None
        assert check_schedule_order(departure, arrival, "Europe/Copenhagen") == ARRIVAL_ORDER_MESSAGE

        draft = {**valid_payload, "departure": departure, "arrival": arrival}
        validate_voyage_draft(draft, "UTC")
        with pytest.raises(VoyageValidationError) as exc_info:
            validate_voyage_draft(draft, "Europe/Copenhagen")
        assert exc_info.value.errors == {"arrival": ARRIVAL_ORDER_MESSAGE}

    def test_non_mapping_draft_counts_as_empty(self):
        errors = _errors(["not", "a", "draft"])
        assert errors["departure"] == "Departure is required"
        assert errors["arrival"] == "Arrival is required"
        assert errors["unitTypes"] == "At least one unit type is required"


@pytest.mark.unit
class TestTimestamps:

    def test_normalize_datetime_local(self):
        assert normalize_timestamp("2025-01-01T10:00", "UTC") == "2025-01-01T10:00:00.000Z"

    def test_normalize_converts_zone_to_utc(self):
        assert normalize_timestamp("2025-06-01T10:00", "Europe/Copenhagen") == "2025-06-01T08:00:00.000Z"
        assert normalize_timestamp("2025-01-01T10:00:00+02:00") == "2025-01-01T08:00:00.000Z"

    def test_normalize_keeps_milliseconds(self):
        assert normalize_timestamp("2025-01-01T10:00:00.123456Z") == "2025-01-01T10:00:00.123Z"

    def test_normalize_rejects_garbage(self):
        with pytest.raises(ValueError):
            normalize_timestamp("not a date")

    def test_parse_timestamp_edge_cases(self):
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp(12345) is None
        assert parse_timestamp("2025-01-01T10:00Z").utcoffset().total_seconds() == 0
