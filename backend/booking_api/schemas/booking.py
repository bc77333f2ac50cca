"""
Pydantic schemas for booking request validation and the nested API shape.

Storage keeps bookings flat (contact_name, event_start, ...); the API
nests them into contact/event sub-objects with camelCase keys. The
mapping is a pure re-nesting, nothing is derived.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from pydantic.alias_generators import to_camel

from booking_api.models.booking import Booking, BookingStatus


EVENT_WINDOW_MESSAGE = "event_end must be after event_start"


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat_utc(value: datetime) -> str:
    """Canonical ISO-8601 form: 2026-03-01T10:00:00.000Z"""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BookingCreate(BaseModel):
    contact_name: str = Field(..., min_length=1, max_length=255)
    contact_email: EmailStr
    event_title: str = Field(..., min_length=1, max_length=255)
    event_start: datetime
    event_end: datetime
    event_details: str
    request_note: Optional[str] = None

    @field_validator("event_start")
    @classmethod
    def normalise_start(cls, value: datetime) -> datetime:
        return to_utc(value)

    @field_validator("event_end")
    @classmethod
    def check_event_window(cls, value: datetime, info: ValidationInfo) -> datetime:
        value = to_utc(value)
        # event_start is missing from info.data when it failed to parse
        start = info.data.get("event_start")
        if start is not None and value <= start:
            raise PydanticCustomError("event_window", EVENT_WINDOW_MESSAGE)
        return value


class BookingUpdate(BaseModel):
    """
    Partial update body. Only keys present in the request take part in the
    merge (see model_fields_set); id, org_id and event_location_id are not
    fields here and are dropped if a client sends them.
    """

    status_id: Optional[BookingStatus] = None
    contact_name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_email: Optional[EmailStr] = None
    event_title: Optional[str] = Field(None, min_length=1, max_length=255)
    event_start: Optional[datetime] = None
    event_end: Optional[datetime] = None
    event_details: Optional[str] = None
    request_note: Optional[str] = None


class BookingContact(BaseModel):
    name: str
    email: str


class BookingEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    location_id: str
    start: str
    end: str
    details: str


class BookingResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    created_at: str
    updated_at: str
    org_id: str
    status: int
    contact: BookingContact
    event: BookingEvent
    request_note: Optional[str] = None

    @classmethod
    def from_row(cls, row: Booking) -> "BookingResponse":
        return cls(
            id=row.id,
            created_at=isoformat_utc(row.created_at),
            updated_at=isoformat_utc(row.updated_at),
            org_id=row.org_id,
            status=row.status_id,
            contact=BookingContact(name=row.contact_name, email=row.contact_email),
            event=BookingEvent(
                title=row.event_title,
                location_id=row.event_location_id,
                start=isoformat_utc(row.event_start),
                end=isoformat_utc(row.event_end),
                details=row.event_details,
            ),
            request_note=row.request_note or None,
        )

    def to_api(self) -> dict:
        # requestNote is the only optional field; it is left out when absent
        return self.model_dump(by_alias=True, exclude_none=True)


class BookingCreated(BaseModel):
    id: int
