"""Error taxonomy for the booking engine.

Every error carries a stable ``kind`` so transports can map it without
inspecting messages.
"""


class BookingError(Exception):
    """Base class for all booking engine errors."""

    kind = "booking_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Malformed or missing input. The caller must fix the request."""

    kind = "validation_error"

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []


class BusinessRuleError(BookingError):
    """Well-formed input that breaks a clinic rule (wrong weekday, past date)."""

    kind = "business_rule_error"


class ConflictError(BookingError):
    """The (date, slot, chair) triple is already taken.

    Callers should refresh availability and pick another slot rather than
    retrying the same request.
    """

    kind = "conflict"


class NotFoundError(BookingError):
    """The id or email selector matched nothing."""

    kind = "not_found"


class AuthorizationError(BookingError):
    """A privileged operation was attempted without an admin session."""

    kind = "authorization_error"


class StorageError(BookingError):
    """The store failed for a reason other than the uniqueness rule.

    The message is safe to show to callers; backend detail is only logged.
    """

    kind = "storage_error"
