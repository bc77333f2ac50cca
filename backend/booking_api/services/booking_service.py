"""
Booking service: the six booking operations over the bookings table.

Every operation issues at most two statements (a read followed by a
dependent write for edit, a read followed by email delivery for approve).
There is no version column, so two concurrent edits of the same booking
are last-write-wins.

Failures are raised as core.errors exceptions:
  - NotFoundError      -> 404
  - StorageError       -> 500, wraps any SQLAlchemyError
  - DeliveryError      -> 500, confirmation email not sent
  - InvalidInputError  -> 422, merged edit leaves an impossible event window
"""

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from booking_api.core.errors import (
    OMITTED,
    DeliveryError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from booking_api.core.logging import get_logger
from booking_api.core.metrics import record_db_operation
from booking_api.models.booking import Booking, BookingStatus
from booking_api.schemas.booking import (
    EVENT_WINDOW_MESSAGE,
    BookingCreate,
    BookingUpdate,
    isoformat_utc,
    to_utc,
)
from booking_api.services.notification_service import EmailSender

logger = get_logger(__name__)

# Columns rewritten by an edit, besides updated_at. request_note is merged separately.
MERGED_FIELDS = (
    "status_id",
    "contact_name",
    "contact_email",
    "event_title",
    "event_start",
    "event_end",
    "event_details",
)

_NO_DATA: list = []


@contextmanager
def _storage(event: str, message: str, data: Any = _NO_DATA, **context):
    """Turn a SQLAlchemyError into StorageError, logging the real cause."""
    try:
        yield
    except SQLAlchemyError as e:
        record_db_operation("error")
        logger.error(event, error=str(e), **context)
        raise StorageError(message, data) from e


async def _fetch_booking(db: AsyncSession, booking_id: int) -> Booking:
    with _storage(
        "booking_read_failed",
        f"Error while getting the booking id: {booking_id}",
        booking_id=booking_id,
    ):
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
    record_db_operation("read")

    if booking is None:
        logger.info("booking_not_found", booking_id=booking_id)
        raise NotFoundError(f"No booking with id: {booking_id} found", [])
    return booking


async def list_bookings(db: AsyncSession) -> list[Booking]:
    """All bookings in storage order. An empty table is reported as NotFound."""
    with _storage("booking_list_failed", "Error while getting all the bookings"):
        result = await db.execute(select(Booking))
        bookings = list(result.scalars().all())
    record_db_operation("read")

    if not bookings:
        logger.info("bookings_table_empty")
        raise NotFoundError("No data for the bookings table", [])
    return bookings


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    return await _fetch_booking(db, booking_id)


async def create_booking(db: AsyncSession, booking_data: BookingCreate) -> int:
    """
    Insert a new PENDING booking and return its generated id.
    org_id and event_location_id are fresh random identifiers.
    """
    values = {
        "org_id": str(uuid.uuid4()),
        "status_id": BookingStatus.PENDING.value,
        "contact_name": booking_data.contact_name,
        "contact_email": booking_data.contact_email,
        "event_title": booking_data.event_title,
        "event_location_id": str(uuid.uuid4()),
        "event_start": to_utc(booking_data.event_start),
        "event_end": to_utc(booking_data.event_end),
        "event_details": booking_data.event_details,
        "request_note": booking_data.request_note,
    }

    with _storage("booking_create_failed", "Error while creating a new booking", data=OMITTED):
        result = await db.execute(insert(Booking).values(**values).returning(Booking.id))
        booking_id = result.scalar_one()
    record_db_operation("write")

    logger.info("booking_created", booking_id=booking_id, org_id=values["org_id"])
    return booking_id


async def delete_booking(db: AsyncSession, booking_id: int) -> None:
    """Hard delete. Zero affected rows means the booking never existed or is gone."""
    with _storage(
        "booking_delete_failed",
        f"Error while deleting booking id: {booking_id}",
        booking_id=booking_id,
    ):
        result = await db.execute(delete(Booking).where(Booking.id == booking_id))
    record_db_operation("write")

    if result.rowcount == 0:
        logger.info("booking_delete_missing", booking_id=booking_id)
        raise NotFoundError(
            f"The booking id:{booking_id} does not exist or has already been deleted"
        )

    logger.info("booking_deleted", booking_id=booking_id)


def merge_booking_update(current: Booking, changes: BookingUpdate, now: datetime) -> dict[str, Any]:
    """
    Field-level merge of a partial update onto the stored row.

    A key counts as supplied only when it is present in the body with a
    non-null value. request_note is the exception: present and null clears
    it, absent keeps it. updated_at is always refreshed to `now`.
    """
    supplied = changes.model_dump(exclude_unset=True)

    merged: dict[str, Any] = {"updated_at": now}
    for field in MERGED_FIELDS:
        value = supplied.get(field)
        merged[field] = getattr(current, field) if value is None else value

    if "request_note" in supplied:
        merged["request_note"] = supplied["request_note"]
    else:
        merged["request_note"] = current.request_note

    merged["status_id"] = int(merged["status_id"])
    merged["event_start"] = to_utc(merged["event_start"])
    merged["event_end"] = to_utc(merged["event_end"])
    return merged


def serialize_merged(merged: dict[str, Any]) -> dict[str, Any]:
    """Flat, JSON-ready view of the persisted field set. A cleared note is left out."""
    data = dict(merged)
    for field in ("updated_at", "event_start", "event_end"):
        data[field] = isoformat_utc(data[field])
    if data.get("request_note") is None:
        data.pop("request_note", None)
    return data


async def edit_booking(db: AsyncSession, booking_id: int, changes: BookingUpdate) -> dict[str, Any]:
    """Merge-update a booking and return the flat field set as persisted."""
    current = await _fetch_booking(db, booking_id)
    merged = merge_booking_update(current, changes, datetime.now(timezone.utc))

    if merged["event_end"] <= merged["event_start"]:
        logger.info("booking_edit_rejected", booking_id=booking_id, reason="event_window")
        raise InvalidInputError(
            "Invalid request data",
            [{"field": "event_end", "message": EVENT_WINDOW_MESSAGE}],
        )

    with _storage(
        "booking_edit_failed",
        f"Error while editing the booking id: {booking_id}",
        booking_id=booking_id,
    ):
        await db.execute(update(Booking).where(Booking.id == booking_id).values(**merged))
    record_db_operation("write")

    logger.info(
        "booking_updated",
        booking_id=booking_id,
        fields=sorted(changes.model_fields_set),
    )
    return serialize_merged(merged)


async def approve_booking(db: AsyncSession, booking_id: int, send_email: EmailSender) -> Booking:
    """
    Send the confirmation email for a booking.
    The stored row, status_id included, is left untouched.
    """
    booking = await _fetch_booking(db, booking_id)

    if not await send_email(booking):
        raise DeliveryError(f"Failed to send confirmation email for booking id: {booking_id}")

    logger.info("booking_approved", booking_id=booking_id, to=booking.contact_email)
    return booking
