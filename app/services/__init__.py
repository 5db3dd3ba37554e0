"""Business logic services."""

from app.services.audit import AuditRecorder, write_audit_event
from app.services.auth import AuthService
from app.services.bookings import BookingService

__all__ = [
    "AuditRecorder",
    "write_audit_event",
    "AuthService",
    "BookingService",
]
