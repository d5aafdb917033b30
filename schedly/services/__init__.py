"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import Availability, BookingService, BookingStoreProtocol, NotifierProtocol
from .notifications import Notification

__all__ = ["Availability", "BookingService", "BookingStoreProtocol", "NotifierProtocol", "Notification"]
