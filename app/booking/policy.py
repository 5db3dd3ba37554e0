"""Booking rules.

Each predicate is total: it returns False for malformed or wrongly typed
input instead of raising, and never touches storage. Presence checks
(blank names, missing fields) belong to the booking service.
"""

from datetime import date, datetime, time

from email_validator import EmailNotValidError, validate_email

from app.booking.schedule import ScheduleConfig
from app.booking.slots import index_for_time, slot_count


def _is_plain_date(value: object) -> bool:
    # datetime is a date subclass; a timestamp is not a calendar date
    return isinstance(value, date) and not isinstance(value, datetime)


def is_designated_weekday(booking_date: date, config: ScheduleConfig) -> bool:
    """Check if the date falls on the clinic weekday."""
    if not _is_plain_date(booking_date):
        return False
    return booking_date.weekday() == config.weekday


def is_past_date(booking_date: date, today: date) -> bool:
    """Check if the date is strictly before today."""
    if not _is_plain_date(booking_date) or not _is_plain_date(today):
        return False
    return booking_date < today


def is_bookable_date(booking_date: date, today: date, config: ScheduleConfig) -> bool:
    """Check if a date is a bookable clinic day.

    Args:
        booking_date: Requested date
        today: Current date in the clinic timezone
        config: Clinic schedule

    Returns:
        True iff the date is the clinic weekday and not before today

    Examples:
        >>> cfg = ScheduleConfig()
        >>> is_bookable_date(date(2030, 1, 4), date(2030, 1, 1), cfg)
        True
        >>> is_bookable_date(date(2030, 1, 3), date(2030, 1, 1), cfg)
        False
    """
    if not _is_plain_date(booking_date) or not _is_plain_date(today):
        return False
    return is_designated_weekday(booking_date, config) and booking_date >= today


def is_valid_slot_index(index: object, config: ScheduleConfig) -> bool:
    """Check if ``index`` is an integer in ``[0, N)``."""
    if isinstance(index, bool) or not isinstance(index, int):
        return False
    return 0 <= index < slot_count(config)


def is_valid_chair(chair: object, config: ScheduleConfig) -> bool:
    """Check if ``chair`` is one of the configured chairs."""
    return isinstance(chair, str) and chair in config.chairs


def is_allowed_email(email: object, config: ScheduleConfig) -> bool:
    """Check email syntax and that its domain is on the allow-list.

    Syntax follows RFC 5322 as enforced by email-validator; no DNS lookup
    is made.

    Examples:
        >>> cfg = ScheduleConfig()
        >>> is_allowed_email("a@alu.medac.es", cfg)
        True
        >>> is_allowed_email("a@gmail.com", cfg)
        False
        >>> is_allowed_email("not-an-email", cfg)
        False
    """
    if not isinstance(email, str):
        return False
    try:
        validated = validate_email(email, check_deliverability=False)
    except (EmailNotValidError, ValueError):
        return False
    return validated.domain.lower() in config.allowed_email_domains


def parse_time_slot(label: object) -> time | None:
    """Parse an ``HH:MM`` label, returning None when malformed."""
    if not isinstance(label, str):
        return None
    try:
        return datetime.strptime(label.strip(), "%H:%M").time()
    except ValueError:
        return None


def is_valid_time_slot(index: object, label: object, config: ScheduleConfig) -> bool:
    """Check that ``label`` is the start time of the slot at ``index``."""
    if not is_valid_slot_index(index, config):
        return False
    start = parse_time_slot(label)
    if start is None:
        return False
    return index_for_time(config, start) == index
