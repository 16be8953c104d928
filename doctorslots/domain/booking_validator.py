"""
Accept/reject decisions for booking and rescheduling requests.

All "today" and "now" comparisons happen in a single configured timezone
(UTC unless told otherwise), on both sides of the comparison.
"""

from datetime import date, datetime
from typing import Callable, Iterable, Optional, Union

import pendulum
from pendulum import DateTime

from .models import DaySchedule, ValidationResult
from .time_slots import SlotRange, is_time_slot_overlapping, is_valid_time_slot_format, split_time_slot, to_minutes

DateLike = Union[date, datetime]
NowProvider = Callable[[], datetime]

MSG_PAST_DATE = "Cannot book appointments in the past"
MSG_INVALID_FORMAT = "Invalid time slot format"
MSG_WRONG_DURATION = "Time slot duration must be {minutes} minutes"
MSG_NOT_WORKING = "Doctor is not available on this day"
MSG_NOT_CONFIGURED = "Doctor schedule not properly configured"
MSG_OUTSIDE_HOURS = "Time slot is outside doctor's working hours"
MSG_BREAK_OVERLAP = "Time slot overlaps with doctor's break"
MSG_ALREADY_BOOKED = "Time slot is already booked"


class BookingValidator:
    """
    Validates a requested slot against a doctor's day and existing bookings.

    The validator holds no state beyond its timezone and clock, so one
    instance can serve any number of concurrent requests.
    """

    def __init__(self, timezone: str = "UTC", now_provider: Optional[NowProvider] = None):
        self.timezone = timezone
        self._now_provider = now_provider

    def now(self) -> DateTime:
        """Current instant in the configured timezone."""
        if self._now_provider is None:
            return pendulum.now(self.timezone)
        return pendulum.instance(self._now_provider(), tz=self.timezone).in_timezone(self.timezone)

    def today(self) -> date:
        return self.now().date()

    def is_past_date(self, value: DateLike) -> bool:
        """True if the calendar date of ``value`` is before today."""
        return self._calendar_date(value) < self.today()

    def is_beyond_booking_window(self, value: DateLike, max_advance_days: int) -> bool:
        """True if ``value`` is more than ``max_advance_days`` calendar days after today."""
        return self._calendar_date(value) > self.today().add(days=max_advance_days)

    def validate_appointment_time(
        self,
        day_schedule: Optional[DaySchedule],
        appointment_date: DateLike,
        time_slot: str,
        booked_slots: Iterable[str] = (),
        duration_minutes: Optional[int] = None,
    ) -> ValidationResult:
        """
        Decide whether ``time_slot`` on ``appointment_date`` can be booked.

        Checks run in a fixed order and the first failure is returned:
        past date, slot format, slot duration, working day, working hours,
        breaks, existing bookings.

        Args:
            day_schedule: Parsed schedule of the requested weekday, or None
                to skip the schedule checks
            appointment_date: Requested calendar date
            time_slot: Requested "HH:mm-HH:mm" slot
            booked_slots: Slots held by active appointments on that date,
                fetched right before the call
            duration_minutes: Required slot length, or None to skip the check

        Raises:
            ValueError: If ``duration_minutes`` is not positive
        """
        if self.is_past_date(appointment_date):
            return ValidationResult.reject(MSG_PAST_DATE)

        try:
            requested = SlotRange.parse(time_slot)
        except ValueError:
            return ValidationResult.reject(MSG_INVALID_FORMAT)

        if duration_minutes is not None and duration_minutes <= 0:
            raise ValueError(f"Slot duration must be positive, got {duration_minutes}")

        if duration_minutes is not None and requested.duration_minutes() != duration_minutes:
            return ValidationResult.reject(MSG_WRONG_DURATION.format(minutes=duration_minutes))

        if day_schedule is not None:
            if not day_schedule.is_working_day:
                return ValidationResult.reject(MSG_NOT_WORKING)

            if not day_schedule.start_time or not day_schedule.end_time:
                return ValidationResult.reject(MSG_NOT_CONFIGURED)

            working = SlotRange.from_times(day_schedule.start_time, day_schedule.end_time)
            if not working.contains(requested):
                return ValidationResult.reject(MSG_OUTSIDE_HOURS)

            for break_period in day_schedule.breaks:
                if is_time_slot_overlapping(time_slot, break_period.as_slot()):
                    return ValidationResult.reject(MSG_BREAK_OVERLAP)

        if time_slot in set(booked_slots):
            return ValidationResult.reject(MSG_ALREADY_BOOKED)

        return ValidationResult.accept()

    def can_cancel_or_reschedule(
        self,
        appointment_date: DateLike,
        hours_before: int = 24,
        time_slot: Optional[str] = None,
    ) -> bool:
        """
        True while there are more than ``hours_before`` hours left.

        A plain date starts at midnight, or at the start of ``time_slot``
        when one is given.
        """
        cutoff = self._appointment_start(appointment_date, time_slot).subtract(hours=hours_before)
        return self.now() < cutoff

    def _calendar_date(self, value: DateLike) -> date:
        if isinstance(value, datetime):
            return pendulum.instance(value, tz=self.timezone).in_timezone(self.timezone).date()
        return value

    def _appointment_start(self, value: DateLike, time_slot: Optional[str]) -> DateTime:
        if isinstance(value, datetime) and time_slot is None:
            return pendulum.instance(value, tz=self.timezone)

        day = self._calendar_date(value)
        start = pendulum.datetime(day.year, day.month, day.day, tz=self.timezone)

        if time_slot is not None:
            if not is_valid_time_slot_format(time_slot):
                raise ValueError(f"Invalid time slot format: {time_slot!r}")
            start = start.add(minutes=to_minutes(split_time_slot(time_slot)[0]))

        return start
