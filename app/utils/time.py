"""Time and clock utilities."""

from datetime import date, datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


class Clock(Protocol):
    """Source of the current calendar date."""

    def today(self) -> date: ...


class ClinicClock:
    """Clock reporting today's date in the clinic's timezone."""

    def __init__(self, timezone_name: str) -> None:
        self.zone = ZoneInfo(timezone_name)

    def today(self) -> date:
        return datetime.now(tz=self.zone).date()


class FixedClock:
    """Clock pinned to a given date (scripts and tests)."""

    def __init__(self, fixed: date) -> None:
        self.fixed = fixed

    def today(self) -> date:
        return self.fixed
