"""Clinic schedule and availability endpoints."""

from fastapi import APIRouter, status

from app.api.deps import Actor, Bookings, Schedule
from app.booking.slots import generate_slots
from app.schemas.booking import (
    AvailabilityRead,
    ScheduleRead,
    SlotAvailabilityRead,
    SlotRead,
)
from app.services.bookings import parse_booking_date

router = APIRouter()


@router.get(
    "",
    response_model=ScheduleRead,
    status_code=status.HTTP_200_OK,
    summary="Clinic schedule",
    description="Bookable weekday, chairs, allowed email domains and slot list",
)
async def get_schedule(config: Schedule) -> ScheduleRead:
    slots = [
        SlotRead(
            index=slot.index,
            start_time=slot.label,
            end_time=slot.end_time.strftime("%H:%M"),
        )
        for slot in generate_slots(config)
    ]
    return ScheduleRead(
        weekday=config.weekday,
        weekday_name=config.weekday_name,
        timezone=config.timezone,
        slot_duration_minutes=config.slot_duration_minutes,
        chairs=list(config.chairs),
        allowed_email_domains=sorted(config.allowed_email_domains),
        slots=slots,
    )


@router.get(
    "/{booking_date}/availability",
    response_model=AvailabilityRead,
    status_code=status.HTTP_200_OK,
    summary="Availability summary",
    description="Total, occupied and free (slot, chair) pairs for a date",
)
async def get_availability(booking_date: str, service: Bookings) -> AvailabilityRead:
    summary = await service.get_availability(parse_booking_date(booking_date))
    return AvailabilityRead.model_validate(summary)


@router.get(
    "/{booking_date}/slots",
    response_model=list[SlotAvailabilityRead],
    status_code=status.HTTP_200_OK,
    summary="Day grid",
    description="Occupancy of every chair in every slot; patient details for admins only",
)
async def get_day_slots(
    booking_date: str,
    service: Bookings,
    actor: Actor,
) -> list[SlotAvailabilityRead]:
    grid = await service.get_day_schedule(parse_booking_date(booking_date), actor)
    return [SlotAvailabilityRead.model_validate(row) for row in grid]
