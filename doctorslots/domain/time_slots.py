"""
Arithmetic on "HH:mm" times and "HH:mm-HH:mm" slot strings.

Every comparison goes through integer minutes since midnight, so nothing
here depends on the strings being zero-padded.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

TIME_PATTERN = r"([01][0-9]|2[0-3]):[0-5][0-9]"

_TIME_RE = re.compile(TIME_PATTERN)
_TIME_SLOT_RE = re.compile(rf"{TIME_PATTERN}-{TIME_PATTERN}")

MINUTES_PER_DAY = 24 * 60


def to_minutes(time: str) -> int:
    """Convert "HH:mm" to minutes since midnight. The format is not checked."""
    hours, minutes = time.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:mm"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def split_time_slot(time_slot: str) -> Tuple[str, str]:
    """Split "HH:mm-HH:mm" into its start and end times."""
    start, end = time_slot.split("-")
    return start, end


def is_valid_time_format(time: object) -> bool:
    """Check for a strict, zero-padded 24h "HH:mm" string."""
    return isinstance(time, str) and _TIME_RE.fullmatch(time) is not None


def is_valid_time_slot_format(time_slot: object) -> bool:
    """
    Check the structure of a "HH:mm-HH:mm" slot.

    Only the shape is checked; a slot whose end precedes its start still
    passes.
    """
    return isinstance(time_slot, str) and _TIME_SLOT_RE.fullmatch(time_slot) is not None


def is_valid_time_slot_duration(time_slot: str, duration_minutes: int) -> bool:
    """Return True if the slot lasts exactly ``duration_minutes``."""
    start, end = split_time_slot(time_slot)
    return to_minutes(end) - to_minutes(start) == duration_minutes


def is_time_slot_overlapping(slot_a: str, slot_b: str) -> bool:
    """
    Half-open overlap test between two slots.

    Adjacent slots ("09:00-09:30" and "09:30-10:00") do not overlap.
    """
    start_a, end_a = (to_minutes(t) for t in split_time_slot(slot_a))
    start_b, end_b = (to_minutes(t) for t in split_time_slot(slot_b))
    return start_a < end_b and start_b < end_a


def calculate_appointment_end_time(start_time: str, duration_minutes: int) -> str:
    """Return the "HH:mm" end of an appointment starting at ``start_time``."""
    return minutes_to_time(to_minutes(start_time) + duration_minutes)


def generate_time_slots(start_time: str, end_time: str, duration_minutes: int) -> List[str]:
    """
    Generate back-to-back slots of ``duration_minutes`` from start to end.

    A trailing step that would run past ``end_time`` is dropped rather than
    clipped, so the slot count is the floor of the window length divided by
    the duration.

    Example:
    09:00 - 10:15, 30 min -> ["09:00-09:30", "09:30-10:00"]
    """
    if duration_minutes <= 0:
        raise ValueError(f"Slot duration must be positive, got {duration_minutes}")

    start = to_minutes(start_time)
    end = to_minutes(end_time)

    slots: List[str] = []
    current = start

    while current + duration_minutes <= end:
        slots.append(f"{minutes_to_time(current)}-{minutes_to_time(current + duration_minutes)}")
        current += duration_minutes

    return slots


@dataclass(frozen=True)
class SlotRange:
    """
    Immutable slot expressed in minutes since midnight.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(
                f"Start time {minutes_to_time(self.start)} must be before "
                f"end time {minutes_to_time(self.end)}"
            )

    @classmethod
    def parse(cls, time_slot: str) -> "SlotRange":
        """
        Build a range from a "HH:mm-HH:mm" slot.

        Raises:
            ValueError: If the slot is malformed or does not move forward in time
        """
        if not is_valid_time_slot_format(time_slot):
            raise ValueError(f"Invalid time slot format: {time_slot!r}")
        start, end = split_time_slot(time_slot)
        return cls(start=to_minutes(start), end=to_minutes(end))

    @classmethod
    def from_times(cls, start_time: str, end_time: str) -> "SlotRange":
        return cls(start=to_minutes(start_time), end=to_minutes(end_time))

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, other: "SlotRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "SlotRange") -> bool:
        """Check if ``other`` lies entirely within this range."""
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{minutes_to_time(self.start)}-{minutes_to_time(self.end)}"
