"""
Core business logic for resolving open slots and admitting bookings.

Both paths share the same day predicate and the same overlap primitive, so a
slot offered by ``open_slots`` is admissible by ``check_admission`` given the
same bookings snapshot.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional

import pendulum
from pendulum import DateTime

from .availability import AvailabilityPolicy
from .exceptions import DayClosed, OutsideHours, PastDate, SlotTaken, ValidationFailure
from .hours import WEEKDAY_NAMES, calendar_day, hour_of_day, hour_to_clock, is_real_hour, weekday_index
from .models import Booking, BookingStatus, CalendarRules, ClosureReason, ContactInfo, Slot


class SlotResolver:
    """
    Combines availability rules with confirmed bookings.

    Read path: candidate slots minus every slot overlapping a booking.
    Write path: ordered admission checks, first failure wins.
    """

    def __init__(self, policy: Optional[AvailabilityPolicy] = None):
        self.policy = policy or AvailabilityPolicy()

    def open_slots(
        self,
        rules: CalendarRules,
        day: date,
        confirmed_bookings: Iterable[Booking],
        now: Optional[datetime] = None
    ) -> List[Slot]:
        """
        Find the bookable slots of ``day``.

        Args:
            rules: Calendar availability rules
            day: Target calendar day
            confirmed_bookings: Bookings on that day; cancelled ones are ignored
            now: Reference instant, defaults to the calendar's current time

        Returns:
            Slots in ascending order; empty when the day is closed
        """
        local_now = self.local_now(rules, now)
        day = calendar_day(day)

        candidates = self.policy.candidate_slots(rules, day, today=calendar_day(local_now))
        if not candidates:
            return []

        busy = self._confirmed(confirmed_bookings)

        open_slots = [
            slot for slot in candidates
            if not any(booking.overlaps(slot.start_hour, slot.end_hour) for booking in busy)
        ]

        # Slots on the current day that already started are gone
        if day == calendar_day(local_now):
            current_hour = hour_of_day(local_now)
            open_slots = [slot for slot in open_slots if slot.start_hour >= current_hour]

        return open_slots

    def check_admission(
        self,
        rules: CalendarRules,
        calendar_ref: str,
        day: date,
        start_hour: float,
        end_hour: float,
        confirmed_bookings: Iterable[Booking],
        now: Optional[datetime] = None,
        contact: Optional[ContactInfo] = None
    ) -> Booking:
        """
        Decide whether a booking request may be accepted.

        Checks, in order:
        0. Structurally valid interval
        1. Not in the past
        2. Day is open
        3. Inside the open-hours window
        4. No overlap with a confirmed booking

        Returns:
            The confirmed, not yet persisted, booking

        Raises:
            ValidationFailure, PastDate, DayClosed, OutsideHours, SlotTaken
        """
        self._validate_interval(start_hour, end_hour)

        local_now = self.local_now(rules, now)
        today = calendar_day(local_now)
        day = calendar_day(day)

        if day < today:
            raise PastDate(f"Cannot book a date in the past ({day.isoformat()})")

        if day == today and start_hour < hour_of_day(local_now):
            raise PastDate(
                f"Cannot book a time in the past ({hour_to_clock(start_hour)} has already passed today)"
            )

        reason = self.policy.closure_reason(rules, day, today=today)
        if reason is not None:
            raise self._day_closed(rules, day, reason)

        hours = rules.hours_open
        if start_hour < hours.start or end_hour > hours.end:
            raise OutsideHours(
                f"Time slot {hour_to_clock(start_hour)}-{hour_to_clock(end_hour)} is outside "
                f"of available hours ({hours})",
                hours_open=hours,
            )

        for booking in self._confirmed(confirmed_bookings):
            if booking.overlaps(start_hour, end_hour):
                raise SlotTaken(
                    f"This time slot is already booked ({booking.slot})",
                    conflict=booking,
                )

        contact = contact or ContactInfo(name="", email="")
        return Booking(
            calendar_ref=calendar_ref,
            date=day,
            start_hour=float(start_hour),
            end_hour=float(end_hour),
            name=contact.name,
            email=contact.email,
            notes=contact.notes,
            status=BookingStatus.CONFIRMED,
        )

    @staticmethod
    def _validate_interval(start_hour, end_hour) -> None:
        errors = {}
        if not is_real_hour(start_hour):
            errors["startHour"] = f"must be a number, got {start_hour!r}"
        if not is_real_hour(end_hour):
            errors["endHour"] = f"must be a number, got {end_hour!r}"
        if errors:
            raise ValidationFailure("Invalid booking interval", field_errors=errors)

        if start_hour >= end_hour:
            raise ValidationFailure(
                f"Start time {start_hour} must be before end time {end_hour}",
                field_errors={"endHour": "must be later than startHour"},
            )

    @staticmethod
    def _day_closed(rules: CalendarRules, day: date, reason: ClosureReason) -> DayClosed:
        open_days = rules.open_weekday_names()
        available = ", ".join(open_days) if open_days else "none"

        if reason is ClosureReason.DISABLED_DATE:
            message = (
                f"This date ({day.isoformat()}) is not available for booking. "
                f"Available days are: {available}"
            )
        else:
            message = (
                f"This day of week ({WEEKDAY_NAMES[weekday_index(day)]}) is not available "
                f"for booking. Available days are: {available}"
            )

        return DayClosed(message, cause=reason, open_weekdays=open_days)

    @staticmethod
    def _confirmed(bookings: Iterable[Booking]) -> List[Booking]:
        return [booking for booking in bookings if booking.is_confirmed]

    @staticmethod
    def local_now(rules: CalendarRules, now: Optional[datetime] = None) -> DateTime:
        """Reference instant on the calendar's clock; naive values count as local."""
        if now is None:
            return AvailabilityPolicy.now(rules)
        if now.tzinfo is None:
            return pendulum.instance(now, tz=rules.timezone)
        return pendulum.instance(now).in_timezone(rules.timezone)
