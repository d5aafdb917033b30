"""
Shared fixtures for the booking engine tests.

Reference week (UTC): Wednesday 2024-11-20 is "now",
Saturday 2024-11-23, Sunday 2024-11-24, Monday 2024-11-25.
"""

from datetime import date

import pendulum
import pytest

from schedly.domain.models import Booking, Calendar, CalendarRules, OpenHours

MONDAY = date(2024, 11, 25)
SATURDAY = date(2024, 11, 23)
NOW = pendulum.datetime(2024, 11, 20, 8, 0, tz="UTC")


def make_rules(**overrides) -> CalendarRules:
    values = dict(
        weekdays_open=frozenset({1, 2, 3, 4, 5}),
        hours_open=OpenHours(start=9, end=17),
        slot_duration_minutes=60,
        disabled_dates=frozenset(),
        timezone="UTC",
    )
    values.update(overrides)
    return CalendarRules(**values)


def make_booking(start_hour: float, end_hour: float, day: date = MONDAY, **overrides) -> Booking:
    values = dict(
        calendar_ref="consulting",
        date=day,
        start_hour=start_hour,
        end_hour=end_hour,
        name="Existing Client",
        email="client@example.com",
    )
    values.update(overrides)
    return Booking(**values)


@pytest.fixture
def rules() -> CalendarRules:
    return make_rules()


@pytest.fixture
def calendar(rules) -> Calendar:
    return Calendar(
        id="consulting",
        name="Consulting",
        rules=rules,
        public_id="pub-consulting",
        owner_name="Alex Owner",
        owner_email="alex@example.com",
    )
