"""
Application services for listing availability and admitting bookings.

The service coordinates the datastore and notifier collaborators and
delegates every decision to the domain-level ``SlotResolver``. Calendar rules
are fetched fresh on every call so a stale rule set can never admit a
booking.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingAlreadyCancelled, SlotTaken, UniquenessViolation
from ..domain.models import Booking, Calendar, CalendarRules, ClosureReason, ContactInfo, Slot
from ..domain.slot_resolver import SlotResolver
from .notifications import Notification, build_booking_confirmation, build_owner_notification

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the datastore behaviour needed by the service."""

    async def fetch_calendar(self, calendar_ref: str) -> Calendar:
        """Return the calendar by id or public id, raise CalendarNotFound otherwise."""

    async def fetch_calendar_rules(self, calendar_ref: str) -> CalendarRules:
        """Return the calendar's current rules, raise CalendarNotFound otherwise."""

    async def fetch_confirmed_bookings(self, calendar_ref: str, day: date) -> List[Booking]:
        """Return confirmed bookings of the calendar on ``day``."""

    async def insert_booking(self, candidate: Booking) -> Booking:
        """Persist and return the booking, raise UniquenessViolation on collision."""

    async def fetch_bookings(self, calendar_ref: str) -> List[Booking]:
        """Return every booking of the calendar, any status."""

    async def fetch_booking(self, booking_id: str) -> Booking:
        """Return a booking by id, raise BookingNotFound otherwise."""

    async def update_booking(self, booking: Booking) -> Booking:
        """Replace a stored booking with the given version."""


class NotifierProtocol(Protocol):
    """Fire-and-forget message delivery."""

    def send(self, notification: Notification) -> None:
        """Deliver the notification or raise NotificationError."""


@dataclass(frozen=True)
class Availability:
    """Open slots of a day and, when there are none by policy, the reason."""
    calendar: Calendar
    day: date
    slots: List[Slot] = field(default_factory=list)
    reason: Optional[ClosureReason] = None

    @property
    def is_closed(self) -> bool:
        return self.reason is not None


class BookingService:
    """
    Orchestrates availability reads and booking admission.

    Dependency inversion toward protocols makes it easy to plug in the JSON
    store or an in-memory store, and to test without network access.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        notifier: Optional[NotifierProtocol] = None,
        resolver: Optional[SlotResolver] = None,
        clock: Callable[[], DateTime] = pendulum.now,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._resolver = resolver or SlotResolver()
        self._clock = clock

    async def available_slots(self, calendar_ref: str, day: date) -> Availability:
        """
        Compute the open slots of ``day``.

        Raises:
            CalendarNotFound: If the calendar does not exist
        """
        calendar = await self._store.fetch_calendar(calendar_ref)
        rules = calendar.rules
        now = self._clock()

        today = self._resolver.local_now(rules, now).date()
        reason = self._resolver.policy.closure_reason(rules, day, today=today)
        if reason is not None:
            logger.debug("Calendar %s closed on %s: %s", calendar.id, day, reason.value)
            return Availability(calendar=calendar, day=day, reason=reason)

        bookings = await self._store.fetch_confirmed_bookings(calendar.id, day)
        slots = self._resolver.open_slots(rules, day, bookings, now=now)

        return Availability(calendar=calendar, day=day, slots=slots)

    async def admit_booking(
        self,
        *,
        calendar_ref: str,
        day: date,
        start_hour: float,
        end_hour: float,
        contact: ContactInfo,
    ) -> Booking:
        """
        Admit a booking request and persist it.

        A uniqueness violation raised by the store means a concurrent writer
        won the slot; it is reported as SlotTaken and never retried.

        Raises:
            CalendarNotFound, ValidationFailure, PastDate, DayClosed,
            OutsideHours, SlotTaken
        """
        calendar = await self._store.fetch_calendar(calendar_ref)
        bookings = await self._store.fetch_confirmed_bookings(calendar.id, day)

        candidate = self._resolver.check_admission(
            calendar.rules,
            calendar.id,
            day,
            start_hour,
            end_hour,
            bookings,
            now=self._clock(),
            contact=contact,
        )

        try:
            booking = await self._store.insert_booking(candidate)
        except UniquenessViolation as exc:
            logger.info(
                "Lost race for %s %s %s on calendar %s",
                day, start_hour, end_hour, calendar.id
            )
            raise SlotTaken(
                "This time slot was booked by someone else in the meantime",
                late=True,
            ) from exc

        logger.info("Booking %s admitted on calendar %s", booking.id, calendar.id)
        await self._notify(booking, calendar)

        return booking

    async def list_bookings(self, calendar_ref: str) -> List[Booking]:
        """All bookings of a calendar ordered by day and start time."""
        calendar = await self._store.fetch_calendar(calendar_ref)
        bookings = await self._store.fetch_bookings(calendar.id)
        return sorted(bookings, key=lambda b: (b.date, b.start_hour))

    async def cancel_booking(self, booking_id: str) -> Booking:
        """
        Release a booking's slot.

        Raises:
            BookingNotFound: If the id is unknown
            BookingAlreadyCancelled: If the booking is not confirmed
        """
        booking = await self._store.fetch_booking(booking_id)
        if not booking.is_confirmed:
            raise BookingAlreadyCancelled(booking_id)

        cancelled = await self._store.update_booking(booking.cancel())
        logger.info("Booking %s cancelled", booking_id)
        return cancelled

    async def _notify(self, booking: Booking, calendar: Calendar) -> None:
        """
        Best-effort delivery; a failed notice never undoes an admission.

        Notifiers are synchronous, so each send runs in a worker thread and
        the event loop keeps serving other requests meanwhile.
        """
        if self._notifier is None:
            return

        notifications = [build_booking_confirmation(booking, calendar)]
        if calendar.owner_email:
            notifications.insert(0, build_owner_notification(booking, calendar))

        for notification in notifications:
            try:
                await asyncio.to_thread(self._notifier.send, notification)
            except Exception:
                logger.exception(
                    "Failed to send '%s' to %s", notification.subject, notification.recipient
                )
