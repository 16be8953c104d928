"""
Tests for the booking validator.
"""

from datetime import date, datetime

import pendulum
import pytest

from doctorslots.domain.booking_validator import BookingValidator
from doctorslots.domain.models import BreakPeriod, DaySchedule, ValidationResult

# Monday morning
NOW = pendulum.datetime(2024, 11, 25, 8, 0, tz="UTC")
TOMORROW = date(2024, 11, 26)


def _validator(now=NOW, timezone="UTC") -> BookingValidator:
    return BookingValidator(timezone=timezone, now_provider=lambda: now)


def _clinic_day() -> DaySchedule:
    return DaySchedule(
        is_working_day=True,
        start_time="09:00",
        end_time="17:00",
        breaks=(BreakPeriod(start="12:00", end="13:00"),),
    )


class TestValidateAppointmentTime:
    """Tests for BookingValidator.validate_appointment_time."""

    @pytest.mark.parametrize(
        "slot, expected",
        [
            ("10:00-10:30", ValidationResult(False, "Time slot is already booked")),
            ("12:30-13:00", ValidationResult(False, "Time slot overlaps with doctor's break")),
            ("09:00-09:30", ValidationResult(True)),
            ("17:00-17:30", ValidationResult(False, "Time slot is outside doctor's working hours")),
            ("08:45-09:15", ValidationResult(False, "Time slot is outside doctor's working hours")),
        ],
    )
    def test_clinic_day_scenario(self, slot, expected):
        result = _validator().validate_appointment_time(
            _clinic_day(), TOMORROW, slot, ["10:00-10:30"], 30
        )

        assert result == expected

    def test_accept_result_is_truthy(self):
        result = _validator().validate_appointment_time(_clinic_day(), TOMORROW, "09:30-10:00", [], 30)

        assert result
        assert result.message is None

    @pytest.mark.parametrize("slot", ["09:00-09:30", "garbage", "12:30-13:00"])
    def test_past_date_always_rejected(self, slot):
        result = _validator().validate_appointment_time(
            DaySchedule.closed(), date(2024, 11, 24), slot, [slot], 45
        )

        assert result == ValidationResult(False, "Cannot book appointments in the past")

    def test_today_is_bookable(self):
        """Only the calendar date is compared, so today is not in the past."""
        result = _validator().validate_appointment_time(_clinic_day(), date(2024, 11, 25), "09:00-09:30")

        assert result.is_valid

    @pytest.mark.parametrize("slot", ["9-10", "09:00-9:30", "24:00-24:30", "10:00-09:30", "10:00-10:00"])
    def test_malformed_slot(self, slot):
        result = _validator().validate_appointment_time(_clinic_day(), TOMORROW, slot)

        assert result.message == "Invalid time slot format"

    @pytest.mark.parametrize("slot", ["10:00-10:30\n", "10:00-10:30 ", " 10:00-10:30"])
    def test_padded_variant_of_booked_slot_is_rejected(self, slot):
        result = _validator().validate_appointment_time(_clinic_day(), TOMORROW, slot, ["10:00-10:30"], 30)

        assert result == ValidationResult(False, "Invalid time slot format")

    def test_duration_mismatch(self):
        result = _validator().validate_appointment_time(_clinic_day(), TOMORROW, "09:00-10:00", [], 30)

        assert result.message == "Time slot duration must be 30 minutes"

    def test_duration_not_checked_when_omitted(self):
        result = _validator().validate_appointment_time(_clinic_day(), TOMORROW, "09:00-10:00")

        assert result.is_valid

    def test_non_positive_duration_is_programmer_error(self):
        with pytest.raises(ValueError):
            _validator().validate_appointment_time(_clinic_day(), TOMORROW, "09:00-09:30", [], 0)

    def test_closed_day(self):
        result = _validator().validate_appointment_time(DaySchedule.closed(), TOMORROW, "09:00-09:30")

        assert result.message == "Doctor is not available on this day"

    def test_working_day_without_hours(self):
        schedule = DaySchedule(is_working_day=True, start_time="09:00")

        result = _validator().validate_appointment_time(schedule, TOMORROW, "09:00-09:30")

        assert result.message == "Doctor schedule not properly configured"

    def test_missing_schedule_skips_schedule_checks(self):
        validator = _validator()

        assert validator.validate_appointment_time(None, TOMORROW, "22:00-22:30").is_valid
        assert validator.validate_appointment_time(None, TOMORROW, "22:00-22:30", ["22:00-22:30"]).message == (
            "Time slot is already booked"
        )

    def test_first_failure_wins(self):
        validator = _validator()

        # Closed day beats the booked slot
        result = validator.validate_appointment_time(DaySchedule.closed(), TOMORROW, "09:00-09:30", ["09:00-09:30"])
        assert result.message == "Doctor is not available on this day"

        # Duration beats the closed day
        result = validator.validate_appointment_time(DaySchedule.closed(), TOMORROW, "09:00-10:00", [], 30)
        assert result.message == "Time slot duration must be 30 minutes"

        # Break beats the booked slot
        result = validator.validate_appointment_time(_clinic_day(), TOMORROW, "12:00-12:30", ["12:00-12:30"])
        assert result.message == "Time slot overlaps with doctor's break"

    def test_slot_ending_at_break_start_is_fine(self):
        result = _validator().validate_appointment_time(_clinic_day(), TOMORROW, "11:30-12:00", [], 30)

        assert result.is_valid


class TestTimezonePolicy:
    """Today is evaluated in the validator's timezone."""

    def test_date_becomes_past_after_local_midnight(self):
        # 23:30 UTC is already the next day in Berlin
        validator = _validator(now=pendulum.datetime(2024, 11, 25, 23, 30, tz="UTC"), timezone="Europe/Berlin")

        assert validator.today() == date(2024, 11, 26)
        assert validator.is_past_date(date(2024, 11, 25))
        assert not validator.is_past_date(date(2024, 11, 26))

    def test_datetime_input_uses_its_local_calendar_date(self):
        validator = _validator(now=pendulum.datetime(2024, 11, 26, 0, 30, tz="Europe/Berlin"), timezone="Europe/Berlin")

        assert not validator.is_past_date(pendulum.datetime(2024, 11, 25, 23, 30, tz="UTC"))
        assert validator.is_past_date(datetime(2024, 11, 25, 23, 0))

    def test_default_clock(self):
        validator = BookingValidator()

        assert not validator.is_past_date(pendulum.today("UTC").date())


class TestBookingWindow:
    """Tests for BookingValidator.is_beyond_booking_window."""

    def test_boundary_is_inclusive(self):
        validator = _validator()

        assert not validator.is_beyond_booking_window(date(2025, 2, 23), 90)
        assert validator.is_beyond_booking_window(date(2025, 2, 24), 90)

    def test_zero_days_allows_today_only(self):
        validator = _validator()

        assert not validator.is_beyond_booking_window(date(2024, 11, 25), 0)
        assert validator.is_beyond_booking_window(TOMORROW, 0)


class TestCanCancelOrReschedule:
    """Tests for BookingValidator.can_cancel_or_reschedule."""

    def test_plain_date_starts_at_midnight(self):
        validator = _validator()

        assert not validator.can_cancel_or_reschedule(date(2024, 11, 26))
        assert validator.can_cancel_or_reschedule(date(2024, 11, 27))

    def test_time_slot_moves_the_start(self):
        validator = _validator()

        assert validator.can_cancel_or_reschedule(date(2024, 11, 26), time_slot="10:00-10:30")
        assert not validator.can_cancel_or_reschedule(date(2024, 11, 26), time_slot="07:30-08:00")

    def test_custom_notice_period(self):
        validator = _validator()

        assert validator.can_cancel_or_reschedule(date(2024, 11, 25), hours_before=0, time_slot="09:00-09:30")
        assert not validator.can_cancel_or_reschedule(date(2024, 11, 25), hours_before=2, time_slot="09:00-09:30")

    def test_datetime_input(self):
        validator = _validator()

        assert not validator.can_cancel_or_reschedule(pendulum.datetime(2024, 11, 26, 7, 0, tz="UTC"))
        assert validator.can_cancel_or_reschedule(pendulum.datetime(2024, 11, 26, 9, 0, tz="UTC"))

    def test_invalid_slot_raises(self):
        with pytest.raises(ValueError):
            _validator().can_cancel_or_reschedule(date(2024, 11, 30), time_slot="soon")
