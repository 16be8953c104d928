"""
In-memory booking data source built from the YAML configuration.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from ..config import AppConfig
from ..domain.exceptions import DoctorNotFoundError, InvalidScheduleError, SlotConflictError
from ..domain.models import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentStatus,
    ScheduleFormat,
    WeeklySchedule,
    booked_slots,
    weekday_name,
)
from ..domain.schedule_parser import parse_day_schedule

logger = logging.getLogger(__name__)


class InMemoryBookingStore:
    """
    Data source that keeps schedules and appointments in memory.

    It satisfies ``BookingDataSource`` so the CLI and tests can run the
    booking service without a database. Like the real storage layer, it
    refuses a second active appointment for the same doctor, date and slot.
    """

    def __init__(self, config: Optional[AppConfig] = None):
        self._schedules: Dict[str, Optional[WeeklySchedule]] = {}
        self._appointments: List[Appointment] = []

        if config is not None:
            self._load_config(config)

    def _load_config(self, config: AppConfig) -> None:
        for doctor in config.doctors:
            if doctor.schedule:
                schedule = doctor.weekly_schedule(default_duration=config.defaults.time_slot_duration)
            else:
                schedule = None
            self._schedules[doctor.id] = schedule

        for appointment in config.appointments:
            self.add_appointment(appointment.to_appointment())

    def set_schedule(self, doctor_id: str, schedule: Optional[WeeklySchedule]) -> None:
        """
        Create or replace a doctor's weekly schedule.

        Raises:
            InvalidScheduleError: If a configured day cannot be parsed
        """
        if schedule is not None:
            for weekday, raw in schedule.days.items():
                result = parse_day_schedule(raw)
                if result.source_format == ScheduleFormat.INVALID:
                    raise InvalidScheduleError(f"Invalid schedule data for {weekday_name(weekday)}: {result.warning}")
        self._schedules[doctor_id] = schedule

    def delete_schedule(self, doctor_id: str) -> None:
        """Remove the whole schedule record of a doctor."""
        self._require_doctor(doctor_id)
        self._schedules[doctor_id] = None

    async def get_weekly_schedule(self, doctor_id: str) -> Optional[WeeklySchedule]:
        self._require_doctor(doctor_id)
        return self._schedules[doctor_id]

    async def get_booked_slots(self, doctor_id: str, on_date: date) -> List[str]:
        self._require_doctor(doctor_id)
        return booked_slots(self.appointments_for(doctor_id, on_date))

    def appointments_for(self, doctor_id: str, on_date: date) -> List[Appointment]:
        return [a for a in self._appointments if a.doctor_id == doctor_id and a.date == on_date]

    def add_appointment(self, appointment: Appointment) -> Appointment:
        """
        Store an appointment.

        Raises:
            DoctorNotFoundError: If the doctor is unknown
            SlotConflictError: If an active appointment already holds the slot
        """
        self._require_doctor(appointment.doctor_id)

        if appointment.is_active and appointment.time_slot in booked_slots(
            self.appointments_for(appointment.doctor_id, appointment.date)
        ):
            raise SlotConflictError(
                f"Slot {appointment.time_slot} on {appointment.date} is already taken "
                f"for doctor {appointment.doctor_id}"
            )

        self._appointments.append(appointment)
        return appointment

    def update_status(self, appointment: Appointment, status: AppointmentStatus) -> Appointment:
        """
        Change the status of a stored appointment.

        Reactivating an appointment is subject to the same slot uniqueness
        rule as adding one.
        """
        if status in ACTIVE_STATUSES and not appointment.is_active:
            others = [a for a in self.appointments_for(appointment.doctor_id, appointment.date) if a is not appointment]
            if appointment.time_slot in booked_slots(others):
                raise SlotConflictError(
                    f"Slot {appointment.time_slot} on {appointment.date} is already taken "
                    f"for doctor {appointment.doctor_id}"
                )

        logger.debug("Appointment %s %s: %s -> %s", appointment.doctor_id, appointment.time_slot, appointment.status, status)
        appointment.status = status
        return appointment

    def _require_doctor(self, doctor_id: str) -> None:
        if doctor_id not in self._schedules:
            raise DoctorNotFoundError(f"Doctor not found: {doctor_id}")
