"""
Hour-fraction arithmetic shared by the availability policy and the resolver.

Times of day are plain real numbers of hours since midnight (``9.5`` is
09:30). Every boundary is derived from an index in one step so that equal
boundaries always compare equal.
"""

import math
import re
from datetime import date, datetime

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def overlaps(a_start: float, a_end: float, b_start: float, b_end: float) -> bool:
    """Half-open overlap test: ``[a_start, a_end)`` against ``[b_start, b_end)``."""
    return a_start < b_end and a_end > b_start


def slot_boundary(start: float, index: int, minutes: int) -> float:
    """Return the boundary ``index`` slots after ``start``."""
    return start + (index * minutes) / 60


def hour_to_clock(hour: float) -> str:
    """
    Format an hour-fraction as wall-clock text.

    Example: 9.5 -> "09:30", 24 -> "24:00"
    """
    total_minutes = int(round(hour * 60))
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def clock_to_hour(text: str) -> float:
    """Parse ``HH:MM`` into an hour-fraction."""
    match = _CLOCK_PATTERN.match(text.strip())
    if not match:
        raise ValueError(f"Invalid time of day: '{text}' (expected HH:MM)")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise ValueError(f"Invalid time of day: '{text}'")

    return hours + minutes / 60


def is_real_hour(value) -> bool:
    """Numbers only; bools and NaN do not count as hours."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def hour_of_day(moment: datetime) -> float:
    """Wall-clock position of ``moment`` as an hour-fraction."""
    return moment.hour + moment.minute / 60 + moment.second / 3600


def weekday_index(day: date) -> int:
    """Day of week with 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def calendar_day(value: date) -> date:
    """Reduce a date or datetime (pendulum included) to a plain calendar day."""
    return date(value.year, value.month, value.day)
