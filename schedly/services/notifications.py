"""
Booking notification messages for calendar owners and the people who book.
"""

from dataclasses import dataclass

import pendulum

from ..domain.models import Booking, Calendar


@dataclass(frozen=True)
class Notification:
    recipient: str
    subject: str
    body: str


def _format_day(booking: Booking) -> str:
    day = pendulum.date(booking.date.year, booking.date.month, booking.date.day)
    return day.format("dddd, MMMM D, YYYY")


def build_owner_notification(booking: Booking, calendar: Calendar) -> Notification:
    """Tell the calendar owner that a new booking arrived."""
    lines = [
        f"Hello {calendar.owner_name or calendar.owner_email},",
        "",
        f'You have a new booking for your calendar "{calendar.name}":',
        "",
        f"Date: {_format_day(booking)}",
        f"Time: {booking.slot}",
        f"Booked by: {booking.name}",
        f"Email: {booking.email}",
    ]
    if booking.notes:
        lines.append(f"Notes: {booking.notes}")
    lines += ["", "You can manage this booking from your dashboard."]

    return Notification(
        recipient=calendar.owner_email,
        subject=f"New Booking: {calendar.name}",
        body="\n".join(lines),
    )


def build_booking_confirmation(booking: Booking, calendar: Calendar) -> Notification:
    """Confirm the booking to the person who made it."""
    lines = [
        f"Hello {booking.name},",
        "",
        "Your booking has been confirmed:",
        "",
        f"Calendar: {calendar.name}",
        f"Date: {_format_day(booking)}",
        f"Time: {booking.slot}",
    ]
    if booking.notes:
        lines.append(f"Your Notes: {booking.notes}")
    lines += ["", "If you need to cancel or reschedule, please contact the calendar owner."]

    return Notification(
        recipient=booking.email,
        subject=f"Booking Confirmation: {calendar.name}",
        body="\n".join(lines),
    )
