"""
Domain models for calendars, slots and bookings.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import FrozenSet, Optional

import pendulum
from pendulum import DateTime

from .hours import WEEKDAY_NAMES, calendar_day, hour_to_clock, overlaps


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ClosureReason(str, Enum):
    """Why a calendar day offers no availability."""
    DISABLED_DATE = "disabled_date"
    WEEKDAY_CLOSED = "weekday_closed"
    PAST_DATE = "past_date"


@dataclass(frozen=True)
class OpenHours:
    """
    Daily open window in hours since midnight.

    Invariant: 0 <= start < end <= 24.
    """
    start: float
    end: float

    def __post_init__(self):
        if not 0 <= self.start < self.end <= 24:
            raise ValueError(
                f"Open hours must satisfy 0 <= start < end <= 24, got {self.start}-{self.end}"
            )

    def __str__(self) -> str:
        return f"{hour_to_clock(self.start)}-{hour_to_clock(self.end)}"


@dataclass(frozen=True)
class CalendarRules:
    """
    Recurring availability of a calendar.

    weekdays_open uses 0=Sunday .. 6=Saturday.
    """
    weekdays_open: FrozenSet[int]
    hours_open: OpenHours
    slot_duration_minutes: int = 60
    disabled_dates: FrozenSet[date] = frozenset()
    timezone: str = "UTC"

    def __post_init__(self):
        if self.slot_duration_minutes <= 0:
            raise ValueError(
                f"slot_duration_minutes must be positive, got {self.slot_duration_minutes}"
            )
        invalid_days = sorted(day for day in self.weekdays_open if day not in range(7))
        if invalid_days:
            raise ValueError(f"weekdays_open must be between 0 and 6, got {invalid_days}")

    def open_weekday_names(self) -> list[str]:
        return [WEEKDAY_NAMES[day] for day in sorted(self.weekdays_open)]


@dataclass(frozen=True)
class Calendar:
    """A bookable calendar and the owner who receives booking notices."""
    id: str
    name: str
    rules: CalendarRules
    public_id: str = ""
    owner_name: str = ""
    owner_email: str = ""
    description: str = ""

    def matches(self, calendar_ref: str) -> bool:
        return calendar_ref in (self.id, self.public_id)


@dataclass(frozen=True)
class Slot:
    """
    A half-open interval ``[start_hour, end_hour)`` on some calendar day.
    """
    start_hour: float
    end_hour: float

    def __post_init__(self):
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"Slot start {self.start_hour} must be before end {self.end_hour}"
            )

    def duration_minutes(self) -> int:
        return int(round((self.end_hour - self.start_hour) * 60))

    def overlaps(self, start_hour: float, end_hour: float) -> bool:
        return overlaps(self.start_hour, self.end_hour, start_hour, end_hour)

    def to_dict(self) -> dict:
        return {"startHour": self.start_hour, "endHour": self.end_hour}

    def __str__(self) -> str:
        return f"{hour_to_clock(self.start_hour)} - {hour_to_clock(self.end_hour)}"


@dataclass(frozen=True)
class ContactInfo:
    name: str
    email: str
    notes: str = ""


@dataclass(frozen=True)
class Booking:
    """
    An appointment on a calendar day.

    Only confirmed bookings occupy time. ``id`` is assigned by the store.
    """
    calendar_ref: str
    date: date
    start_hour: float
    end_hour: float
    name: str = ""
    email: str = ""
    notes: str = ""
    status: BookingStatus = BookingStatus.CONFIRMED
    id: Optional[str] = None
    created_at: DateTime = field(default_factory=lambda: pendulum.now("UTC"))

    def __post_init__(self):
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"Booking start {self.start_hour} must be before end {self.end_hour}"
            )

    @property
    def is_confirmed(self) -> bool:
        return self.status is BookingStatus.CONFIRMED

    @property
    def slot(self) -> Slot:
        return Slot(start_hour=self.start_hour, end_hour=self.end_hour)

    def overlaps(self, start_hour: float, end_hour: float) -> bool:
        return overlaps(start_hour, end_hour, self.start_hour, self.end_hour)

    def with_id(self, booking_id: str) -> "Booking":
        return replace(self, id=booking_id)

    def cancel(self) -> "Booking":
        """Return the cancelled version of this booking."""
        if not self.is_confirmed:
            raise ValueError(f"Booking {self.id} is already {self.status.value}")
        return replace(self, status=BookingStatus.CANCELLED)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "calendarRef": self.calendar_ref,
            "date": self.date.isoformat(),
            "startHour": self.start_hour,
            "endHour": self.end_hour,
            "name": self.name,
            "email": self.email,
            "notes": self.notes,
            "status": self.status.value,
            "createdAt": self.created_at.to_iso8601_string(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Booking":
        return cls(
            id=data.get("id"),
            calendar_ref=data["calendarRef"],
            date=calendar_day(pendulum.parse(data["date"], exact=True)),
            start_hour=float(data["startHour"]),
            end_hour=float(data["endHour"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            notes=data.get("notes") or "",
            status=BookingStatus(data.get("status", BookingStatus.CONFIRMED.value)),
            created_at=pendulum.parse(data["createdAt"]) if data.get("createdAt") else pendulum.now("UTC"),
        )

    def format_display(self) -> str:
        """
        Format the booking for display.
        Format: Weekday, Month D, YYYY | HH:MM - HH:MM
        """
        day = pendulum.date(self.date.year, self.date.month, self.date.day)
        return f"{day.format('dddd, MMMM D, YYYY')} | {self.slot}"
