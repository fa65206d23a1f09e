"""
Adapters layer - Sources of already booked sessions.
"""

from .booking_store import BLOCKING_STATUSES, InMemoryBookingStore, JsonBookingStore

__all__ = ["BLOCKING_STATUSES", "InMemoryBookingStore", "JsonBookingStore"]
