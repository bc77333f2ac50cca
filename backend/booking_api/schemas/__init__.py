from booking_api.schemas.booking import (
    BookingCreate,
    BookingCreated,
    BookingResponse,
    BookingUpdate,
)

__all__ = [
    "BookingCreate", "BookingCreated", "BookingResponse", "BookingUpdate",
]
