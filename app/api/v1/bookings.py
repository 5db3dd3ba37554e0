"""Booking endpoints.

Patients create bookings and cancel them by email without an account.
Admins can additionally edit patient details and delete a single booking
by id. Errors raised by the booking service are translated to responses
by the ``BookingError`` handler in ``app.main``.
"""

from fastapi import APIRouter, Query, status

from app.api.deps import Actor, Bookings
from app.schemas.booking import (
    BookingCreate,
    BookingCreated,
    BookingDeleted,
    BookingRead,
    BookingUpdate,
)
from app.services.bookings import parse_booking_date

router = APIRouter()


@router.get(
    "",
    response_model=list[BookingRead],
    status_code=status.HTTP_200_OK,
    summary="List bookings",
    description="Filter by date, patient email and/or id; all filters are combined",
)
async def list_bookings(
    service: Bookings,
    booking_date: str | None = Query(None, alias="date"),
    email: str | None = None,
    booking_id: int | None = Query(None, alias="id"),
) -> list[BookingRead]:
    """List bookings ordered by date, slot and chair."""
    parsed_date = parse_booking_date(booking_date) if booking_date else None

    bookings = await service.list_bookings(
        booking_date=parsed_date,
        email=email,
        booking_id=booking_id,
    )
    return [BookingRead.model_validate(b) for b in bookings]


@router.post(
    "",
    response_model=BookingCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
    description="Book one chair in one slot of a clinic day",
)
async def create_booking(
    request: BookingCreate,
    service: Bookings,
    actor: Actor,
) -> BookingCreated:
    """Create a booking.

    Returns 400 for invalid input or a non-bookable date and 409 when the
    slot and chair are already taken.
    """
    booking_id = await service.create_booking(request, actor)
    return BookingCreated(id=booking_id)


@router.get(
    "/{booking_id}",
    response_model=BookingRead,
    status_code=status.HTTP_200_OK,
    summary="Get booking",
)
async def get_booking(booking_id: int, service: Bookings) -> BookingRead:
    booking = await service.get_booking(booking_id)
    return BookingRead.model_validate(booking)


@router.put(
    "/{booking_id}",
    response_model=BookingRead,
    status_code=status.HTTP_200_OK,
    summary="Update booking",
    description="Change patient name and email (admin only)",
)
async def update_booking(
    booking_id: int,
    request: BookingUpdate,
    service: Bookings,
    actor: Actor,
) -> BookingRead:
    """Update patient details of a booking."""
    await service.update_booking(
        booking_id,
        patient_name=request.patient_name,
        patient_email=request.patient_email,
        actor=actor,
    )
    booking = await service.get_booking(booking_id)
    return BookingRead.model_validate(booking)


@router.delete(
    "",
    response_model=BookingDeleted,
    status_code=status.HTTP_200_OK,
    summary="Delete bookings",
    description="Delete one booking by id (admin) or every booking of an email",
)
async def delete_bookings(
    service: Bookings,
    actor: Actor,
    booking_id: int | None = Query(None, alias="id"),
    email: str | None = None,
) -> BookingDeleted:
    """Delete by id or by patient email. The id wins if both are given."""
    removed = await service.delete_booking(actor, booking_id=booking_id, email=email)
    return BookingDeleted(deleted_count=removed)
