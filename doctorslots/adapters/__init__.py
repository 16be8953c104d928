"""
Adapters layer - Data sources for the booking service.
"""

from .memory_store import InMemoryBookingStore

__all__ = ["InMemoryBookingStore"]
