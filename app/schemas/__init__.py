"""Pydantic schemas for request/response validation."""

from app.schemas.audit_event import AuditEventFilter, AuditEventRead
from app.schemas.auth import (
    AdminLoginRequest,
    AdminRead,
    ChangePasswordRequest,
    SessionStatus,
    TokenResponse,
)
from app.schemas.booking import (
    AvailabilityRead,
    BookingCreate,
    BookingCreated,
    BookingDeleted,
    BookingRead,
    BookingUpdate,
    ScheduleRead,
    SlotAvailabilityRead,
)

__all__ = [
    "AdminLoginRequest",
    "AdminRead",
    "ChangePasswordRequest",
    "SessionStatus",
    "TokenResponse",
    "AuditEventFilter",
    "AuditEventRead",
    "AvailabilityRead",
    "BookingCreate",
    "BookingCreated",
    "BookingDeleted",
    "BookingRead",
    "BookingUpdate",
    "ScheduleRead",
    "SlotAvailabilityRead",
]
