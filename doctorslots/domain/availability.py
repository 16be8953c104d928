"""
Slot grid calculation for a single day.

Pure domain logic without any external dependencies (no database, no I/O).
"""

from typing import Collection, Iterable, List

from .models import DEFAULT_TIME_SLOT_DURATION, AvailableSlot, DaySchedule
from .time_slots import SlotRange, generate_time_slots, is_time_slot_overlapping, split_time_slot


class AvailabilityCalculator:
    """
    Builds the slot grid of a working day.

    Algorithm:
    1. Split the working window into back-to-back slots of the configured duration
    2. Flag every slot that overlaps one of the day's breaks
    3. Mark a slot available when it is neither a break nor already booked
    """

    def __init__(self, slot_duration_minutes: int = DEFAULT_TIME_SLOT_DURATION):
        if slot_duration_minutes <= 0:
            raise ValueError(f"Slot duration must be positive, got {slot_duration_minutes}")
        self.slot_duration_minutes = slot_duration_minutes

    def generate_available_slots(
        self,
        schedule: DaySchedule,
        booked_slots: Iterable[str] = (),
    ) -> List[AvailableSlot]:
        """
        Produce every slot of the day with its availability.

        Args:
            schedule: Parsed configuration of the day
            booked_slots: Slot strings already held by active appointments

        Returns:
            Slots in chronological order; empty for a closed day
        """
        if not schedule.is_working_day or not schedule.start_time or not schedule.end_time:
            return []

        booked = set(booked_slots)
        slots: List[AvailableSlot] = []

        for slot in generate_time_slots(schedule.start_time, schedule.end_time, self.slot_duration_minutes):
            start, end = split_time_slot(slot)
            is_break = self._overlaps_break(slot, schedule)
            slots.append(
                AvailableSlot(
                    time=start,
                    end_time=end,
                    is_available=not is_break and slot not in booked,
                    is_break=is_break,
                )
            )

        return slots

    def free_slots(self, schedule: DaySchedule, booked_slots: Collection[str] = ()) -> List[str]:
        """Return only the bookable slot strings of the day."""
        return [s.slot for s in self.generate_available_slots(schedule, booked_slots) if s.is_available]

    def is_doctor_available(self, schedule: DaySchedule, time_slot: str) -> bool:
        """
        Check that a slot lies within working hours and clear of breaks.

        Bookings are not considered here.
        """
        if not schedule.is_working_day or not schedule.start_time or not schedule.end_time:
            return False

        try:
            requested = SlotRange.parse(time_slot)
        except ValueError:
            return False

        working = SlotRange.from_times(schedule.start_time, schedule.end_time)
        if not working.contains(requested):
            return False

        return not self._overlaps_break(time_slot, schedule)

    @staticmethod
    def _overlaps_break(time_slot: str, schedule: DaySchedule) -> bool:
        return any(is_time_slot_overlapping(time_slot, b.as_slot()) for b in schedule.breaks)
