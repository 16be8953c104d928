"""
Domain models for doctor schedules, slot grids and booking decisions.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

# Index 0 is Sunday, matching how doctor schedules are keyed.
WEEKDAY_NAMES: Tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

DEFAULT_TIME_SLOT_DURATION = 30

# A single day's configuration as stored: JSON text, a legacy "HH:mm-HH:mm"
# range, an already-decoded mapping, or nothing at all.
RawDaySchedule = Union[str, Mapping[str, Any], None]


def weekday_index(on_date: date) -> int:
    """Return the weekday of a date with 0=Sunday and 6=Saturday."""
    return on_date.isoweekday() % 7


def weekday_name(index: int) -> str:
    """Return the lowercase weekday name for a 0=Sunday index."""
    return WEEKDAY_NAMES[index]


def weekday_from_name(name: str) -> int:
    """
    Resolve a weekday name (any case) to its 0=Sunday index.

    Raises:
        ValueError: If the name is not a weekday
    """
    try:
        return WEEKDAY_NAMES.index(name.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown weekday: {name!r}") from None


@dataclass(frozen=True)
class BreakPeriod:
    """A pause inside a working day, as "HH:mm" start and end."""
    start: str
    end: str

    def as_slot(self) -> str:
        return f"{self.start}-{self.end}"

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class DaySchedule:
    """
    Normalized working-hours configuration for one weekday.

    Invariant when ``is_working_day`` is set: start and end are present,
    start is before end, and every break starts before it ends. The parser
    turns anything else into a closed day.
    """
    is_working_day: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    breaks: Tuple[BreakPeriod, ...] = ()

    @classmethod
    def closed(cls) -> "DaySchedule":
        """The "not working" sentinel."""
        return cls(is_working_day=False)

    def to_dict(self) -> Dict[str, Any]:
        """Return the stored JSON shape of this day."""
        if not self.is_working_day:
            return {"isWorkingDay": False}
        return {
            "isWorkingDay": True,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "breaks": [b.to_dict() for b in self.breaks],
        }

    def format_display(self) -> str:
        if not self.is_working_day:
            return "Closed"
        text = f"{self.start_time} - {self.end_time}"
        if self.breaks:
            text += " (breaks: " + ", ".join(b.as_slot() for b in self.breaks) + ")"
        return text


class ScheduleFormat(str, enum.Enum):
    """Which representation a raw day configuration was read from."""
    STRUCTURED = "structured"
    LEGACY_RANGE = "legacy_range"
    UNCONFIGURED = "unconfigured"
    INVALID = "invalid"


@dataclass(frozen=True)
class ParseWarning:
    """Why a raw day configuration was downgraded to a closed day."""
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} ({extra})"


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one day.

    ``schedule`` is always usable; ``warning`` is set when the input was
    malformed and should be logged by the caller.
    """
    schedule: DaySchedule
    source_format: ScheduleFormat
    warning: Optional[ParseWarning] = None

    @property
    def ok(self) -> bool:
        return self.warning is None


@dataclass
class WeeklySchedule:
    """
    A doctor's week: raw per-day configuration keyed 0=Sunday..6=Saturday.

    Missing weekdays are not configured and count as closed. One slot
    duration applies to every day.
    """
    days: Dict[int, RawDaySchedule] = field(default_factory=dict)
    time_slot_duration: int = DEFAULT_TIME_SLOT_DURATION

    def raw_for(self, weekday: int) -> RawDaySchedule:
        return self.days.get(weekday)

    def raw_for_date(self, on_date: date) -> RawDaySchedule:
        return self.raw_for(weekday_index(on_date))


@dataclass
class AvailableSlot:
    """
    One entry of a day's slot grid.
    """
    time: str
    end_time: str
    is_available: bool
    is_break: bool = False

    @property
    def slot(self) -> str:
        return f"{self.time}-{self.end_time}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "endTime": self.end_time,
            "isAvailable": self.is_available,
            "isBreak": self.is_break,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Accept/reject decision for a booking or reschedule request."""
    is_valid: bool
    message: Optional[str] = None

    @classmethod
    def accept(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def reject(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, message=message)

    def __bool__(self) -> bool:
        return self.is_valid


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    RESCHEDULED = "RESCHEDULED"
    REJECTED = "REJECTED"


# Appointments in these statuses hold their slot.
ACTIVE_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED})


@dataclass
class Appointment:
    """A booked appointment as kept by a data source."""
    doctor_id: str
    date: date
    time_slot: str
    status: AppointmentStatus = AppointmentStatus.PENDING

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


def booked_slots(appointments: List[Appointment]) -> List[str]:
    """Slot strings held by the active appointments in ``appointments``."""
    return [a.time_slot for a in appointments if a.is_active]
