"""
Domain-specific exception hierarchy for the slot engine.

Booking decisions are returned as ``ValidationResult`` values, not raised.
These errors cover lookups and storage-level conflicts around the engine.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class DoctorNotFoundError(SchedulingError):
    """Raised when a doctor cannot be resolved by id or name."""


class SlotConflictError(SchedulingError):
    """Raised when a slot is already claimed by an active appointment."""


class InvalidScheduleError(SchedulingError):
    """Raised when a schedule write contains a day that cannot be parsed."""
