"""Database models for the booking service."""

from app.models.audit_event import AuditAction, AuditEvent
from app.models.booking import BOOKING_TRIPLE_CONSTRAINT, Booking
from app.models.user import AdminUser

__all__ = [
    "AdminUser",
    "AuditAction",
    "AuditEvent",
    "BOOKING_TRIPLE_CONSTRAINT",
    "Booking",
]
