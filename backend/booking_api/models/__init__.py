from booking_api.models.booking import Booking, BookingStatus

__all__ = ["Booking", "BookingStatus"]
