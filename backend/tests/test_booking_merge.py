"""
Tests for the partial-update merge and the row to API mapping.
"""

from datetime import datetime, timezone

import pytest

from booking_api.models.booking import Booking, BookingStatus
from booking_api.schemas.booking import BookingResponse, BookingUpdate, isoformat_utc
from booking_api.services.booking_service import merge_booking_update, serialize_merged

NOW = datetime(2026, 10, 19, 12, 30, 15, 123456, tzinfo=timezone.utc)


@pytest.fixture
def stored() -> Booking:
    return Booking(
        id=3,
        created_at=datetime(2026, 2, 1, 8, 0),
        updated_at=datetime(2026, 2, 1, 8, 0),
        org_id="org-1",
        status_id=BookingStatus.PENDING.value,
        contact_name="Alan Turing",
        contact_email="alan@example.com",
        event_title="Reading Group",
        event_location_id="loc-1",
        event_start=datetime(2026, 4, 1, 18, 0),
        event_end=datetime(2026, 4, 1, 20, 0),
        event_details="Chapter 3",
        request_note="Quiet room",
    )


def test_merge_empty_body_only_touches_updated_at(stored):
    merged = merge_booking_update(stored, BookingUpdate(), NOW)
    assert merged["updated_at"] == NOW
    assert merged["status_id"] == 0
    assert merged["contact_name"] == "Alan Turing"
    assert merged["event_start"] == datetime(2026, 4, 1, 18, 0, tzinfo=timezone.utc)
    assert merged["request_note"] == "Quiet room"


def test_merge_supplied_values_win(stored):
    changes = BookingUpdate.model_validate(
        {"status_id": 1, "event_details": "Chapter 4", "contact_email": "turing@example.com"}
    )
    merged = merge_booking_update(stored, changes, NOW)
    assert merged["status_id"] == 1
    assert merged["event_details"] == "Chapter 4"
    assert merged["contact_email"] == "turing@example.com"
    assert merged["event_title"] == "Reading Group"


def test_merge_null_on_regular_field_keeps_stored_value(stored):
    changes = BookingUpdate.model_validate({"contact_name": None})
    merged = merge_booking_update(stored, changes, NOW)
    assert merged["contact_name"] == "Alan Turing"


@pytest.mark.parametrize(
    "body, expected",
    [
        ({}, "Quiet room"),
        ({"request_note": None}, None),
        ({"request_note": "Near the window"}, "Near the window"),
    ],
)
def test_merge_request_note(stored, body, expected):
    merged = merge_booking_update(stored, BookingUpdate.model_validate(body), NOW)
    assert merged["request_note"] == expected


def test_serialize_merged_drops_cleared_note(stored):
    merged = merge_booking_update(stored, BookingUpdate.model_validate({"request_note": None}), NOW)
    data = serialize_merged(merged)
    assert "request_note" not in data
    assert data["updated_at"] == "2026-10-19T12:30:15.123Z"
    assert data["event_end"] == "2026-04-01T20:00:00.000Z"


def test_update_rejects_unknown_status():
    with pytest.raises(ValueError):
        BookingUpdate.model_validate({"status_id": 42})


def test_row_mapping_is_lossless(stored):
    """Flattening the API shape back gives every stored column again."""
    api = BookingResponse.from_row(stored).to_api()
    flattened = {
        "id": api["id"],
        "created_at": api["createdAt"],
        "updated_at": api["updatedAt"],
        "org_id": api["orgId"],
        "status_id": api["status"],
        "contact_name": api["contact"]["name"],
        "contact_email": api["contact"]["email"],
        "event_title": api["event"]["title"],
        "event_location_id": api["event"]["locationId"],
        "event_start": api["event"]["start"],
        "event_end": api["event"]["end"],
        "event_details": api["event"]["details"],
        "request_note": api["requestNote"],
    }
    for column in flattened:
        value = getattr(stored, column)
        if isinstance(value, datetime):
            value = isoformat_utc(value)
        assert flattened[column] == value


def test_row_mapping_omits_empty_note(stored):
    stored.request_note = ""
    assert "requestNote" not in BookingResponse.from_row(stored).to_api()


def test_isoformat_utc_converts_offsets():
    value = datetime.fromisoformat("2026-05-10T17:00:00+02:00")
    assert isoformat_utc(value) == "2026-05-10T15:00:00.000Z"
