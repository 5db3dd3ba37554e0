"""Slot calendar for a clinic day.

Slots are derived purely from the schedule configuration: the same config
always yields the same sequence, and slot indexes are positions in that
sequence in chronological order.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from app.booking.schedule import ScheduleConfig

# Any date works as an anchor; slots never cross midnight.
_ANCHOR = datetime(2000, 1, 1)


@dataclass(frozen=True)
class Slot:
    """One bookable interval within a clinic day."""

    index: int
    start_time: time
    end_time: time

    @property
    def label(self) -> str:
        """Start time as shown to patients and stored on bookings."""
        return self.start_time.strftime("%H:%M")


def generate_slots(config: ScheduleConfig) -> list[Slot]:
    """Return the ordered slots for any bookable day.

    Starting at ``day_start``, a slot is emitted and the cursor advanced by
    the slot duration while the slot still ends at or before ``day_end``.

    Examples:
        >>> [s.label for s in generate_slots(ScheduleConfig())][:3]
        ['15:15', '15:55', '16:35']
    """
    duration = timedelta(minutes=config.slot_duration_minutes)
    cursor = datetime.combine(_ANCHOR.date(), config.day_start)
    end = datetime.combine(_ANCHOR.date(), config.day_end)

    slots: list[Slot] = []
    while cursor + duration <= end:
        slots.append(
            Slot(
                index=len(slots),
                start_time=cursor.time(),
                end_time=(cursor + duration).time(),
            )
        )
        cursor += duration
    return slots


def slot_count(config: ScheduleConfig) -> int:
    """Authoritative number of slots per day (``N``)."""
    return len(generate_slots(config))


def slot_at(config: ScheduleConfig, index: int) -> Slot | None:
    """Return the slot at ``index`` or None when out of range."""
    slots = generate_slots(config)
    if isinstance(index, bool) or not isinstance(index, int):
        return None
    if 0 <= index < len(slots):
        return slots[index]
    return None


def index_for_time(config: ScheduleConfig, start_time: time) -> int | None:
    """Reverse lookup: the index of the slot starting at ``start_time``."""
    for slot in generate_slots(config):
        if slot.start_time == start_time:
            return slot.index
    return None
