"""
Tests for the in-memory booking store.
"""

import asyncio
from datetime import date

import pytest

from doctorslots.adapters.memory_store import InMemoryBookingStore
from doctorslots.config import AppConfig
from doctorslots.domain.exceptions import DoctorNotFoundError, InvalidScheduleError, SlotConflictError
from doctorslots.domain.models import Appointment, AppointmentStatus, WeeklySchedule
from doctorslots.domain.schedule_parser import schedule_for_date

DAY = date(2030, 1, 7)


def _config() -> AppConfig:
    return AppConfig(
        doctors=[
            {"id": "dr-house", "name": "Gregory House", "schedule": {"monday": "09:00-17:00"}},
            {"id": "dr-wilson", "name": "James Wilson"},
        ],
        appointments=[
            {"doctor_id": "dr-house", "date": "2030-01-07", "time_slot": "10:00-10:30"},
            {"doctor_id": "dr-house", "date": "2030-01-07", "time_slot": "11:00-11:30", "status": "CANCELLED"},
        ],
    )


class TestInMemoryBookingStore:
    """Tests for InMemoryBookingStore."""

    def test_booked_slots_only_count_active_appointments(self):
        store = InMemoryBookingStore(_config())

        assert asyncio.run(store.get_booked_slots("dr-house", DAY)) == ["10:00-10:30"]
        assert asyncio.run(store.get_booked_slots("dr-house", date(2030, 1, 8))) == []

    def test_schedule_lookup(self):
        store = InMemoryBookingStore(_config())

        house = asyncio.run(store.get_weekly_schedule("dr-house"))

        assert house.time_slot_duration == 30
        assert schedule_for_date(house, DAY).start_time == "09:00"
        assert asyncio.run(store.get_weekly_schedule("dr-wilson")) is None

    def test_unknown_doctor(self):
        store = InMemoryBookingStore(_config())

        with pytest.raises(DoctorNotFoundError):
            asyncio.run(store.get_weekly_schedule("dr-nobody"))

        with pytest.raises(DoctorNotFoundError):
            store.add_appointment(Appointment(doctor_id="dr-nobody", date=DAY, time_slot="09:00-09:30"))

    def test_second_active_booking_conflicts(self):
        store = InMemoryBookingStore(_config())

        with pytest.raises(SlotConflictError):
            store.add_appointment(Appointment(doctor_id="dr-house", date=DAY, time_slot="10:00-10:30"))

    def test_cancelled_slot_can_be_rebooked(self):
        store = InMemoryBookingStore(_config())

        store.add_appointment(Appointment(doctor_id="dr-house", date=DAY, time_slot="11:00-11:30"))

        assert sorted(asyncio.run(store.get_booked_slots("dr-house", DAY))) == ["10:00-10:30", "11:00-11:30"]

    def test_cancelling_frees_the_slot(self):
        store = InMemoryBookingStore(_config())
        appointment = store.appointments_for("dr-house", DAY)[0]

        store.update_status(appointment, AppointmentStatus.CANCELLED)

        assert asyncio.run(store.get_booked_slots("dr-house", DAY)) == []

    def test_reactivating_a_taken_slot_conflicts(self):
        store = InMemoryBookingStore(_config())
        cancelled = store.appointments_for("dr-house", DAY)[1]
        store.add_appointment(Appointment(doctor_id="dr-house", date=DAY, time_slot="11:00-11:30"))

        with pytest.raises(SlotConflictError):
            store.update_status(cancelled, AppointmentStatus.CONFIRMED)

    def test_delete_schedule(self):
        store = InMemoryBookingStore(_config())

        store.delete_schedule("dr-house")

        assert asyncio.run(store.get_weekly_schedule("dr-house")) is None

    def test_set_schedule_accepts_structured_and_legacy_days(self):
        store = InMemoryBookingStore(_config())
        weekly = WeeklySchedule(days={1: '{"isWorkingDay": false}', 2: "10:00-14:00", 3: None}, time_slot_duration=20)

        store.set_schedule("dr-wilson", weekly)

        assert asyncio.run(store.get_weekly_schedule("dr-wilson")) is weekly

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("{not json", "Invalid schedule data for tuesday"),
            ('{"isWorkingDay": true, "startTime": "17:00", "endTime": "09:00"}', "Start time must be before end time"),
        ],
    )
    def test_set_schedule_rejects_unparseable_day(self, raw, message):
        store = InMemoryBookingStore(_config())
        old = asyncio.run(store.get_weekly_schedule("dr-house"))

        with pytest.raises(InvalidScheduleError, match=message):
            store.set_schedule("dr-house", WeeklySchedule(days={1: "09:00-12:00", 2: raw}))

        assert asyncio.run(store.get_weekly_schedule("dr-house")) is old
