"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityCalculator
from .booking_validator import BookingValidator
from .models import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentStatus,
    AvailableSlot,
    BreakPeriod,
    DaySchedule,
    ParseResult,
    ParseWarning,
    ScheduleFormat,
    ValidationResult,
    WeeklySchedule,
)
from .schedule_parser import (
    get_day_schedule,
    parse_day_schedule,
    schedule_for_date,
    schedule_for_weekday,
    serialize_day_schedule,
)

__all__ = [
    "ACTIVE_STATUSES",
    "Appointment",
    "AppointmentStatus",
    "AvailabilityCalculator",
    "AvailableSlot",
    "BookingValidator",
    "BreakPeriod",
    "DaySchedule",
    "ParseResult",
    "ParseWarning",
    "ScheduleFormat",
    "ValidationResult",
    "WeeklySchedule",
    "get_day_schedule",
    "parse_day_schedule",
    "schedule_for_date",
    "schedule_for_weekday",
    "serialize_day_schedule",
]
