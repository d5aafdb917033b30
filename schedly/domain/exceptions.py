"""
Domain-specific exception hierarchy for the booking engine.
"""

from typing import Dict, Optional, Sequence


class SchedlyError(Exception):
    """Base class for all application-level errors."""


class CalendarNotFound(SchedlyError):
    """Raised when a calendar reference resolves to nothing."""

    def __init__(self, calendar_ref: str):
        super().__init__(f"Calendar not found: {calendar_ref}")
        self.calendar_ref = calendar_ref


class BookingNotFound(SchedlyError):
    """Raised when a booking id resolves to nothing."""

    def __init__(self, booking_id: str):
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id


class UniquenessViolation(SchedlyError):
    """Raised by a store when a confirmed booking already holds the same start."""


class NotificationError(SchedlyError):
    """Raised when a notification cannot be delivered."""


class BookingRejected(SchedlyError):
    """
    Base class for admission rejections.

    ``kind`` is the stable code surfaced to callers.
    """
    kind = "rejected"


class ValidationFailure(BookingRejected):
    kind = "validation_failure"

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.field_errors = field_errors or {}


class PastDate(BookingRejected):
    kind = "past_date"


class DayClosed(BookingRejected):
    kind = "day_closed"

    def __init__(self, message: str, cause, open_weekdays: Sequence[str]):
        super().__init__(message)
        self.cause = cause
        self.open_weekdays = list(open_weekdays)


class OutsideHours(BookingRejected):
    kind = "outside_hours"

    def __init__(self, message: str, hours_open):
        super().__init__(message)
        self.hours_open = hours_open


class SlotTaken(BookingRejected):
    """
    The requested interval collides with a confirmed booking.

    ``late`` is set when the collision surfaced as a uniqueness violation at
    persistence time rather than during the overlap check.
    """
    kind = "slot_taken"

    def __init__(self, message: str, conflict=None, late: bool = False):
        super().__init__(message)
        self.conflict = conflict
        self.late = late


class BookingAlreadyCancelled(SchedlyError):
    """Raised when cancelling a booking that no longer holds its slot."""

    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} is already cancelled")
        self.booking_id = booking_id
