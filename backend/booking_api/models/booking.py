"""
Booking model: the flat storage shape of a reservation request.

Key design decisions:
- org_id and event_location_id are opaque UUID strings generated on create
- status_id is a small integer drawn from BookingStatus, PENDING by default
- Deletion is a hard removal; there is no soft-delete state
"""

import enum

from sqlalchemy import Column, DateTime, Integer, SmallInteger, String, Text

from booking_api.db.base import Base, TimestampMixin


class BookingStatus(enum.IntEnum):
    PENDING = 0
    APPROVED = 1
    REJECTED = 2
    CANCELLED = 3


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(36), nullable=False)
    status_id = Column(SmallInteger, nullable=False, default=BookingStatus.PENDING.value)
    contact_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False)
    event_title = Column(String(255), nullable=False)
    event_location_id = Column(String(36), nullable=False)
    event_start = Column(DateTime(timezone=True), nullable=False)
    event_end = Column(DateTime(timezone=True), nullable=False)
    event_details = Column(Text, nullable=False)
    request_note = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, title={self.event_title}, status={self.status_id})>"
