"""Static clinic schedule configuration.

Read once from settings and treated as immutable for the process lifetime.
"""

from dataclasses import dataclass
from datetime import time
from functools import lru_cache

from app.core.config import Settings, settings

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


@dataclass(frozen=True)
class ScheduleConfig:
    """Clinic day window, slot length and bookable resources.

    Attributes:
        day_start: Start time of the first slot
        day_end: No slot may end after this time
        slot_duration_minutes: Length of every slot
        chairs: Bookable chair identifiers, in display order
        allowed_email_domains: Lower-case email domains allowed to book
        weekday: Bookable weekday as ``date.weekday()`` (Friday = 4)
        timezone: IANA timezone used to decide what "today" is
    """

    day_start: time = time(15, 15)
    day_end: time = time(20, 30)
    slot_duration_minutes: int = 40
    chairs: tuple[str, ...] = ("rojo", "azul", "amarillo")
    allowed_email_domains: frozenset[str] = frozenset({"alu.medac.es", "medac.es"})
    weekday: int = 4
    timezone: str = "Europe/Madrid"

    def __post_init__(self) -> None:
        if self.slot_duration_minutes <= 0:
            raise ValueError(
                f"slot_duration_minutes must be positive, got {self.slot_duration_minutes}"
            )
        if self.day_end <= self.day_start:
            raise ValueError("day_end must be after day_start")
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"weekday must be between 0 and 6, got {self.weekday}")
        if not self.chairs:
            raise ValueError("at least one chair must be configured")
        object.__setattr__(
            self,
            "allowed_email_domains",
            frozenset(d.lower() for d in self.allowed_email_domains),
        )

    @property
    def weekday_name(self) -> str:
        return WEEKDAY_NAMES[self.weekday]


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.strip().split(":")
    return time(int(hours), int(minutes))


def schedule_from_settings(source: Settings) -> ScheduleConfig:
    """Build the schedule from application settings."""
    return ScheduleConfig(
        day_start=_parse_hhmm(source.day_start),
        day_end=_parse_hhmm(source.day_end),
        slot_duration_minutes=source.slot_duration_minutes,
        chairs=tuple(source.chairs),
        allowed_email_domains=frozenset(source.allowed_email_domains),
        weekday=source.booking_weekday,
        timezone=source.clinic_timezone,
    )


@lru_cache
def get_schedule_config() -> ScheduleConfig:
    """Get the cached schedule for this process."""
    return schedule_from_settings(settings)
