"""
In-memory datastore for calendars and bookings.
"""

import uuid
from datetime import date
from typing import Dict, Iterable, List

from ..domain.exceptions import BookingNotFound, CalendarNotFound, UniquenessViolation
from ..domain.hours import calendar_day
from ..domain.models import Booking, Calendar, CalendarRules


class InMemoryBookingStore:
    """
    Dict-backed store that enforces the booking uniqueness constraint.

    At most one confirmed booking may exist per
    (calendar, date, start_hour). Each insert runs without awaiting, so the
    check and the write happen as one step on the event loop.
    """

    def __init__(self, calendars: Iterable[Calendar] = (), bookings: Iterable[Booking] = ()):
        self.calendars: Dict[str, Calendar] = {c.id: c for c in calendars}
        self.bookings: Dict[str, Booking] = {}
        for booking in bookings:
            booking_id = booking.id or uuid.uuid4().hex
            self.bookings[booking_id] = booking.with_id(booking_id)

    def put_calendar(self, calendar: Calendar) -> None:
        self.calendars[calendar.id] = calendar

    def _find_calendar(self, calendar_ref: str) -> Calendar:
        if calendar_ref in self.calendars:
            return self.calendars[calendar_ref]
        for calendar in self.calendars.values():
            if calendar.matches(calendar_ref):
                return calendar
        raise CalendarNotFound(calendar_ref)

    async def fetch_calendar(self, calendar_ref: str) -> Calendar:
        return self._find_calendar(calendar_ref)

    async def fetch_calendar_rules(self, calendar_ref: str) -> CalendarRules:
        return self._find_calendar(calendar_ref).rules

    async def fetch_confirmed_bookings(self, calendar_ref: str, day: date) -> List[Booking]:
        day = calendar_day(day)
        return [
            booking for booking in self.bookings.values()
            if booking.calendar_ref == calendar_ref
            and booking.date == day
            and booking.is_confirmed
        ]

    async def insert_booking(self, candidate: Booking) -> Booking:
        self._check_unique(candidate)
        booking = candidate.with_id(uuid.uuid4().hex)
        self.bookings[booking.id] = booking
        return booking

    async def fetch_bookings(self, calendar_ref: str) -> List[Booking]:
        return [b for b in self.bookings.values() if b.calendar_ref == calendar_ref]

    async def fetch_booking(self, booking_id: str) -> Booking:
        try:
            return self.bookings[booking_id]
        except KeyError:
            raise BookingNotFound(booking_id) from None

    async def update_booking(self, booking: Booking) -> Booking:
        if booking.id not in self.bookings:
            raise BookingNotFound(str(booking.id))
        self.bookings[booking.id] = booking
        return booking

    def _check_unique(self, candidate: Booking) -> None:
        if not candidate.is_confirmed:
            return
        for existing in self.bookings.values():
            if (
                existing.is_confirmed
                and existing.calendar_ref == candidate.calendar_ref
                and existing.date == candidate.date
                and existing.start_hour == candidate.start_hour
            ):
                raise UniquenessViolation(
                    f"Confirmed booking {existing.id} already starts at "
                    f"{candidate.start_hour} on {candidate.date.isoformat()}"
                )
