"""
Tests for hour-fraction arithmetic helpers.
"""

from datetime import date

import pendulum
import pytest

from schedly.domain.hours import (
    calendar_day,
    clock_to_hour,
    hour_of_day,
    hour_to_clock,
    is_real_hour,
    overlaps,
    slot_boundary,
    weekday_index,
)


class TestOverlaps:
    """Tests for the half-open overlap primitive."""

    def test_partial_overlap(self):
        assert overlaps(10, 11, 10.5, 11.5)
        assert overlaps(10.5, 11.5, 10, 11)

    def test_containment(self):
        assert overlaps(9, 17, 10, 11)
        assert overlaps(10, 11, 9, 17)

    def test_back_to_back_is_not_overlap(self):
        """An interval ending where another starts does not collide."""
        assert not overlaps(16.5, 17, 17, 18)
        assert not overlaps(17, 18, 16.5, 17)

    def test_disjoint(self):
        assert not overlaps(9, 10, 11, 12)


class TestSlotBoundary:
    """Boundaries are computed from the index, not accumulated."""

    def test_quarter_hours(self):
        assert slot_boundary(9, 0, 15) == 9
        assert slot_boundary(9, 3, 15) == 9.75
        assert slot_boundary(9, 4, 15) == 10

    def test_no_drift_for_non_binary_steps(self):
        """Step of 20 minutes: the 3rd boundary lands exactly on the hour."""
        assert slot_boundary(9, 3, 20) == 10
        assert slot_boundary(9, 24, 20) == 17


class TestClockConversion:
    """Tests for hour-fraction <-> wall-clock text."""

    def test_hour_to_clock(self):
        assert hour_to_clock(9) == "09:00"
        assert hour_to_clock(9.5) == "09:30"
        assert hour_to_clock(16.75) == "16:45"
        assert hour_to_clock(24) == "24:00"

    def test_clock_to_hour(self):
        assert clock_to_hour("09:30") == 9.5
        assert clock_to_hour("9:15") == 9.25
        assert clock_to_hour("24:00") == 24

    @pytest.mark.parametrize("text", ["9", "09:60", "25:00", "24:30", "nine"])
    def test_clock_to_hour_rejects_malformed_text(self, text):
        with pytest.raises(ValueError, match="Invalid time of day"):
            clock_to_hour(text)


class TestDayHelpers:
    """Tests for weekday and calendar-day normalisation."""

    def test_weekday_index_is_sunday_based(self):
        assert weekday_index(date(2024, 11, 24)) == 0  # Sunday
        assert weekday_index(date(2024, 11, 25)) == 1  # Monday
        assert weekday_index(date(2024, 11, 23)) == 6  # Saturday

    def test_weekday_index_accepts_pendulum_dates(self):
        assert weekday_index(pendulum.date(2024, 11, 25)) == 1

    def test_calendar_day_drops_time_of_day(self):
        moment = pendulum.datetime(2024, 11, 25, 23, 59, tz="Europe/Berlin")
        assert calendar_day(moment) == date(2024, 11, 25)
        assert type(calendar_day(moment)) is date

    def test_hour_of_day(self):
        moment = pendulum.datetime(2024, 11, 25, 9, 45, tz="UTC")
        assert hour_of_day(moment) == 9.75


class TestIsRealHour:
    def test_numbers(self):
        assert is_real_hour(9)
        assert is_real_hour(9.5)

    def test_non_numbers(self):
        assert not is_real_hour("9")
        assert not is_real_hour(True)
        assert not is_real_hour(None)
        assert not is_real_hour(float("nan"))
