"""
Booking endpoints. Every response is the {status, message, data?} envelope.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from booking_api.db.session import get_db
from booking_api.schemas.booking import BookingCreate, BookingCreated, BookingResponse, BookingUpdate
from booking_api.services.booking_service import (
    approve_booking,
    create_booking,
    delete_booking,
    edit_booking,
    get_booking,
    list_bookings,
)
from booking_api.services.notification_service import EmailSender, get_email_sender
from booking_api.core.errors import envelope
from booking_api.core.metrics import track_booking_operation

router = APIRouter(prefix="/bookings", tags=["Bookings"])

# bookings.id is a 32-bit INTEGER column
MAX_BOOKING_ID = 2_147_483_647


@router.get("/")
async def list_bookings_endpoint(db: AsyncSession = Depends(get_db)):
    """Get every booking. An empty table answers 404 with an empty list."""
    with track_booking_operation("list"):
        bookings = await list_bookings(db)
    return envelope(
        status.HTTP_200_OK,
        "Retrieved all data from bookings table",
        [BookingResponse.from_row(b).to_api() for b in bookings],
    )


@router.get("/{booking_id}")
async def get_booking_endpoint(
    booking_id: int = Path(..., ge=1, le=MAX_BOOKING_ID),
    db: AsyncSession = Depends(get_db),
):
    with track_booking_operation("get"):
        booking = await get_booking(db, booking_id)
    return envelope(
        status.HTTP_200_OK,
        f"Retrieved booking id: {booking_id} data",
        BookingResponse.from_row(booking).to_api(),
    )


@router.post("/")
async def create_booking_endpoint(booking_data: BookingCreate, db: AsyncSession = Depends(get_db)):
    """
    Create a booking in PENDING status.

    Event dates are stored in canonical UTC form. org_id and
    event_location_id are generated server side; only the new id is returned.
    """
    with track_booking_operation("create"):
        booking_id = await create_booking(db, booking_data)
    return envelope(
        status.HTTP_200_OK,
        f"New booking with booking id: {booking_id} created",
        BookingCreated(id=booking_id).model_dump(),
    )


@router.delete("/{booking_id}")
async def delete_booking_endpoint(
    booking_id: int = Path(..., ge=1, le=MAX_BOOKING_ID),
    db: AsyncSession = Depends(get_db),
):
    """Permanently remove a booking."""
    with track_booking_operation("delete"):
        await delete_booking(db, booking_id)
    return envelope(status.HTTP_200_OK, f"Deleted booking id:{booking_id}")


@router.patch("/{booking_id}")
async def edit_booking_endpoint(
    changes: BookingUpdate,
    booking_id: int = Path(..., ge=1, le=MAX_BOOKING_ID),
    db: AsyncSession = Depends(get_db),
):
    """
    Partially update a booking.

    Fields missing from the body keep their stored value; `request_note: null`
    clears the note. Returns the merged flat field set.
    """
    with track_booking_operation("edit"):
        merged = await edit_booking(db, booking_id, changes)
    return envelope(status.HTTP_200_OK, f"Updated booking id: {booking_id} with new data", merged)


@router.post("/{booking_id}/approve")
async def approve_booking_endpoint(
    booking_id: int = Path(..., ge=1, le=MAX_BOOKING_ID),
    db: AsyncSession = Depends(get_db),
    send_email: EmailSender = Depends(get_email_sender),
):
    """Send the confirmation email to the booking contact."""
    with track_booking_operation("approve"):
        booking = await approve_booking(db, booking_id, send_email)
    return envelope(
        status.HTTP_200_OK,
        f"Confirmation email to {booking.contact_email} for booking id:{booking_id} sent",
    )
