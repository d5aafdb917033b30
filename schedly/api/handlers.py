"""
Request handling adapter between raw JSON payloads and the booking service.

Raw inputs are coerced exactly once here (numeric strings to floats, ISO
strings to dates); everything past this module works with typed values.
Results are mapped to ``(status_code, body)`` tuples ready for any HTTP layer.
"""

from datetime import date
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..domain.exceptions import (
    BookingAlreadyCancelled,
    BookingNotFound,
    BookingRejected,
    CalendarNotFound,
    DayClosed,
    OutsideHours,
    SlotTaken,
    ValidationFailure,
)
from ..domain.hours import WEEKDAY_NAMES, weekday_index
from ..domain.models import ClosureReason, ContactInfo
from ..services.booking_service import BookingService

Response = Tuple[int, Dict[str, Any]]

EMAIL_PATTERN = r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$"
MAX_NOTES_LENGTH = 500


class AvailabilityQuery(BaseModel):
    calendar: str = Field(min_length=1)
    day: date = Field(alias="date")


class BookingRequest(BaseModel):
    """Body of a booking request (camelCase keys, as sent by clients)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    calendar: str = Field(min_length=1)
    day: date = Field(alias="date")
    start_time: float
    end_time: float
    name: str
    email: str = Field(pattern=EMAIL_PATTERN)
    notes: str = Field(default="", max_length=MAX_NOTES_LENGTH)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be a number")
        return value

    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("notes", mode="before")
    @classmethod
    def default_notes(cls, value: Any) -> Any:
        return "" if value is None else value

    def contact(self) -> ContactInfo:
        return ContactInfo(name=self.name, email=self.email, notes=self.notes)


def _field_errors(exc: ValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]


def _not_found(message: str) -> Response:
    return 404, {"success": False, "message": message}


def _rejection(exc: BookingRejected) -> Response:
    body: Dict[str, Any] = {"success": False, "reason": exc.kind, "message": str(exc)}

    if isinstance(exc, DayClosed):
        body["cause"] = exc.cause.value
        body["availableDays"] = exc.open_weekdays
    elif isinstance(exc, OutsideHours):
        body["availableHours"] = {"start": exc.hours_open.start, "end": exc.hours_open.end}
    elif isinstance(exc, ValidationFailure) and exc.field_errors:
        body["errors"] = [
            {"field": name, "message": message} for name, message in exc.field_errors.items()
        ]

    status = 409 if isinstance(exc, SlotTaken) else 400
    return status, body


async def get_available_slots(service: BookingService, calendar_ref: str, day: Any) -> Response:
    """
    GET available-slots for a calendar day.

    A closed day is a successful response with an empty list plus a reason.
    """
    try:
        query = AvailabilityQuery(calendar=calendar_ref, date=day)
    except ValidationError as exc:
        return 400, {
            "success": False,
            "reason": ValidationFailure.kind,
            "message": "Please provide a valid calendar and date",
            "errors": _field_errors(exc),
        }

    try:
        availability = await service.available_slots(query.calendar, query.day)
    except CalendarNotFound:
        return _not_found("Calendar not found")

    body: Dict[str, Any] = {
        "success": True,
        "data": [slot.to_dict() for slot in availability.slots],
    }

    if availability.is_closed:
        rules = availability.calendar.rules
        available = ", ".join(rules.open_weekday_names()) or "none"
        body["reason"] = availability.reason.value

        if availability.reason is ClosureReason.WEEKDAY_CLOSED:
            body["message"] = (
                f"This day ({WEEKDAY_NAMES[weekday_index(query.day)]}) is not available for "
                f"booking. Available days are: {available}"
            )
        elif availability.reason is ClosureReason.DISABLED_DATE:
            body["message"] = "This date is not available for booking"
        else:
            body["message"] = "This date is in the past"

    return 200, body


async def post_booking(service: BookingService, payload: Any) -> Response:
    """POST booking: admit the request or explain the rejection."""
    try:
        request = BookingRequest.model_validate(payload)
    except ValidationError as exc:
        return 400, {
            "success": False,
            "reason": ValidationFailure.kind,
            "message": "Invalid booking request",
            "errors": _field_errors(exc),
        }

    try:
        booking = await service.admit_booking(
            calendar_ref=request.calendar,
            day=request.day,
            start_hour=request.start_time,
            end_hour=request.end_time,
            contact=request.contact(),
        )
    except CalendarNotFound:
        return _not_found("Calendar not found")
    except BookingRejected as exc:
        return _rejection(exc)

    return 201, {"success": True, "data": booking.to_dict()}


async def cancel_booking(service: BookingService, booking_id: str) -> Response:
    """PUT booking cancel: release the slot of a confirmed booking."""
    try:
        booking = await service.cancel_booking(booking_id)
    except BookingNotFound:
        return _not_found("Booking not found")
    except BookingAlreadyCancelled as exc:
        return 400, {"success": False, "message": str(exc)}

    return 200, {"success": True, "data": booking.to_dict()}


async def list_bookings(service: BookingService, calendar_ref: str) -> Response:
    try:
        bookings = await service.list_bookings(calendar_ref)
    except CalendarNotFound:
        return _not_found("Calendar not found")

    return 200, {
        "success": True,
        "count": len(bookings),
        "data": [booking.to_dict() for booking in bookings],
    }
