"""
Request handling adapter - maps raw payloads to service calls and responses.
"""

from .handlers import BookingRequest, cancel_booking, get_available_slots, list_bookings, post_booking

__all__ = ["BookingRequest", "cancel_booking", "get_available_slots", "list_bookings", "post_booking"]
