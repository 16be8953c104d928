"""
Application services for booking checks and slot queries.

The service fetches a doctor's weekly schedule and the booked slots of a
date through a data source adapter, then delegates every decision to the
domain-level ``BookingValidator`` and ``AvailabilityCalculator``. Keeping the
data source behind a small protocol lets tests plug in a stub.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Protocol

from ..domain.availability import AvailabilityCalculator
from ..domain.booking_validator import BookingValidator
from ..domain.models import AvailableSlot, ValidationResult, WeeklySchedule
from ..domain.schedule_parser import schedule_for_date

logger = logging.getLogger(__name__)

MSG_SCHEDULE_MISSING = "Doctor schedule not configured"
MSG_TOO_LATE_TO_CANCEL = "Appointment cannot be cancelled (too close to appointment time)"
MSG_TOO_LATE_TO_RESCHEDULE = "Appointment cannot be rescheduled (too close to appointment time)"
MSG_TOO_FAR_AHEAD = "Appointments can only be booked up to {days} days in advance"


class BookingDataSource(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    async def get_weekly_schedule(self, doctor_id: str) -> Optional[WeeklySchedule]:
        """Return the doctor's schedule, or None if none was saved yet."""

    async def get_booked_slots(self, doctor_id: str, on_date: date) -> List[str]:
        """Return the slots held by active appointments on ``on_date``."""


class BookingService:
    """
    Orchestrates schedule lookup, booked-slot retrieval and validation.

    Booked slots are re-read on every check. Two requests racing for the same
    slot can both pass here; the data source's uniqueness rule decides.
    """

    def __init__(
        self,
        data_source: BookingDataSource,
        validator: BookingValidator,
        cancellation_notice_hours: int = 24,
        max_advance_days: Optional[int] = 90,
    ) -> None:
        self._data_source = data_source
        self._validator = validator
        self._cancellation_notice_hours = cancellation_notice_hours
        self._max_advance_days = max_advance_days

    async def check_booking(self, *, doctor_id: str, on_date: date, time_slot: str) -> ValidationResult:
        """Validate a new appointment request."""
        return await self._check_slot(
            doctor_id=doctor_id,
            on_date=on_date,
            time_slot=time_slot,
            own_slot=None,
        )

    async def check_reschedule(
        self,
        *,
        doctor_id: str,
        current_date: date,
        current_slot: str,
        new_date: date,
        new_slot: str,
    ) -> ValidationResult:
        """
        Validate moving an appointment to ``new_date``/``new_slot``.

        The notice period counts from midnight of ``current_date``. The
        appointment's own slot does not block the move when it stays on the
        same date.
        """
        if not self._validator.can_cancel_or_reschedule(current_date, hours_before=self._cancellation_notice_hours):
            logger.info("Reschedule refused for doctor %s on %s: notice period passed", doctor_id, current_date)
            return ValidationResult.reject(MSG_TOO_LATE_TO_RESCHEDULE)

        own_slot = current_slot if new_date == current_date else None
        return await self._check_slot(
            doctor_id=doctor_id,
            on_date=new_date,
            time_slot=new_slot,
            own_slot=own_slot,
        )

    def check_cancellation(self, *, appointment_date: date) -> ValidationResult:
        """Validate cancelling an appointment, counting from midnight of its date."""
        if self._validator.can_cancel_or_reschedule(appointment_date, hours_before=self._cancellation_notice_hours):
            return ValidationResult.accept()
        return ValidationResult.reject(MSG_TOO_LATE_TO_CANCEL)

    async def get_available_slots(self, *, doctor_id: str, on_date: date) -> List[AvailableSlot]:
        """Return the doctor's slot grid for a date."""
        schedule = await self._data_source.get_weekly_schedule(doctor_id)
        if schedule is None:
            return []

        booked = await self._data_source.get_booked_slots(doctor_id, on_date)
        calculator = AvailabilityCalculator(slot_duration_minutes=schedule.time_slot_duration)

        return calculator.generate_available_slots(schedule_for_date(schedule, on_date), booked)

    async def _check_slot(
        self,
        *,
        doctor_id: str,
        on_date: date,
        time_slot: str,
        own_slot: Optional[str],
    ) -> ValidationResult:
        schedule = await self._data_source.get_weekly_schedule(doctor_id)
        if schedule is None:
            return ValidationResult.reject(MSG_SCHEDULE_MISSING)

        if self._max_advance_days is not None and self._validator.is_beyond_booking_window(
            on_date, self._max_advance_days
        ):
            result = ValidationResult.reject(MSG_TOO_FAR_AHEAD.format(days=self._max_advance_days))
        else:
            booked = await self._data_source.get_booked_slots(doctor_id, on_date)
            if own_slot is not None:
                booked = [slot for slot in booked if slot != own_slot]

            result = self._validator.validate_appointment_time(
                schedule_for_date(schedule, on_date),
                on_date,
                time_slot,
                booked,
                schedule.time_slot_duration,
            )

        if not result.is_valid:
            logger.info(
                "Rejected slot %s for doctor %s on %s: %s",
                time_slot,
                doctor_id,
                on_date,
                result.message,
            )
        return result
