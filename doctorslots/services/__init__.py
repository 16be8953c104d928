"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking import BookingDataSource, BookingService

__all__ = ["BookingDataSource", "BookingService"]
