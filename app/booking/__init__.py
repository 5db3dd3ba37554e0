"""Slot allocation and booking validity engine."""

from app.booking.actor import ActorContext
from app.booking.errors import (
    AuthorizationError,
    BookingError,
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.booking.policy import (
    is_allowed_email,
    is_bookable_date,
    is_valid_chair,
    is_valid_slot_index,
    is_valid_time_slot,
)
from app.booking.schedule import ScheduleConfig, get_schedule_config
from app.booking.slots import Slot, generate_slots, slot_count

__all__ = [
    "ActorContext",
    "AuthorizationError",
    "BookingError",
    "BusinessRuleError",
    "ConflictError",
    "NotFoundError",
    "ScheduleConfig",
    "Slot",
    "StorageError",
    "ValidationError",
    "generate_slots",
    "get_schedule_config",
    "is_allowed_email",
    "is_bookable_date",
    "is_valid_chair",
    "is_valid_slot_index",
    "is_valid_time_slot",
    "slot_count",
]
