"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityPolicy
from .models import Booking, BookingStatus, Calendar, CalendarRules, ClosureReason, ContactInfo, OpenHours, Slot
from .slot_resolver import SlotResolver

__all__ = [
    "AvailabilityPolicy",
    "Booking",
    "BookingStatus",
    "Calendar",
    "CalendarRules",
    "ClosureReason",
    "ContactInfo",
    "OpenHours",
    "Slot",
    "SlotResolver",
]
