"""Booking request/response schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    """Booking request as received from a patient or admin.

    Fields are optional here so the booking service can report every
    missing field at once instead of failing on the first.
    """

    booking_date: date | str | None = None
    slot_index: int | None = None
    time_slot: str | None = None
    chair: str | None = Field(None, max_length=50)
    patient_name: str | None = Field(None, max_length=150)
    patient_email: str | None = Field(None, max_length=255)


class BookingUpdate(BaseModel):
    """Admin edit of patient details. Date, slot and chair are fixed."""

    patient_name: str | None = Field(None, max_length=150)
    patient_email: str | None = Field(None, max_length=255)


class BookingRead(BaseModel):
    """Booking response."""

    id: int
    booking_date: date
    slot_index: int
    time_slot: str
    chair: str
    patient_name: str
    patient_email: str
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingCreated(BaseModel):
    """Identifier of a newly created booking."""

    id: int


class BookingDeleted(BaseModel):
    """Result of a delete by id or by email."""

    deleted_count: int


class SlotRead(BaseModel):
    """One slot of the clinic day."""

    index: int
    start_time: str
    end_time: str


class ScheduleRead(BaseModel):
    """Static clinic schedule."""

    weekday: int
    weekday_name: str
    timezone: str
    slot_duration_minutes: int
    chairs: list[str]
    allowed_email_domains: list[str]
    slots: list[SlotRead]


class AvailabilityRead(BaseModel):
    """Capacity summary for one date."""

    booking_date: date
    is_bookable: bool
    total_capacity: int
    occupied: int
    available: int

    model_config = {"from_attributes": True}


class ChairStatusRead(BaseModel):
    """Occupancy of one chair in one slot."""

    chair: str
    booked: bool
    booking_id: int | None = None
    patient_name: str | None = None

    model_config = {"from_attributes": True}


class SlotAvailabilityRead(BaseModel):
    """One row of the day grid."""

    index: int
    start_time: str
    end_time: str
    available_chairs: int
    chairs: list[ChairStatusRead]

    model_config = {"from_attributes": True}
