"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pendulum
import pytest
from typer.testing import CliRunner

from schedly import __version__
from schedly.cli.app import app

runner = CliRunner()

DAY = "2099-01-05"


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    data = {
        "calendars": [{
            "id": "consulting",
            "publicId": "pub-consulting",
            "name": "Consulting",
            "availableDays": [0, 1, 2, 3, 4, 5, 6],
            "availableHours": {"start": 9, "end": 12},
            "slotDuration": 60,
            "disabledDates": ["2099-01-06"],
        }],
        "bookings": [],
    }
    (tmp_path / "data.json").write_text(json.dumps(data), encoding="utf-8")

    config_path = tmp_path / "config.yaml"
    config_path.write_text("data_file: data.json\ntimezone: UTC\n", encoding="utf-8")
    return config_path


def _bookings(config_file: Path) -> list:
    data = json.loads((config_file.parent / "data.json").read_text(encoding="utf-8"))
    return data["bookings"]


def _book(config_file: Path, start: str = "10:00", end: str = "11:00", email: str = "jane@example.com"):
    return runner.invoke(app, [
        "book", "consulting", DAY, start, end,
        "--name", "Jane Doe", "--email", email,
        "--config", str(config_file),
    ])


class TestCli:
    """Tests for the schedly commands."""

    def test_calendars(self, config_file):
        result = runner.invoke(app, ["calendars", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "consulting" in result.stdout

    def test_slots(self, config_file):
        result = runner.invoke(app, ["slots", "pub-consulting", DAY, "--config", str(config_file)])

        assert result.exit_code == 0
        assert "3 open slot(s)" in result.stdout
        assert "09:00 - 10:00" in result.stdout

    def test_slots_on_disabled_date(self, config_file):
        result = runner.invoke(app, ["slots", "consulting", "2099-01-06", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "disabled_date" in result.stdout

    def test_book_and_list(self, config_file):
        result = _book(config_file)

        assert result.exit_code == 0
        assert "Booked" in result.stdout
        saved = _bookings(config_file)
        assert len(saved) == 1
        assert saved[0]["startHour"] == 10
        assert saved[0]["calendarRef"] == "consulting"

        result = runner.invoke(app, ["bookings", "consulting", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Bookings" in result.stdout

        result = runner.invoke(app, ["slots", "consulting", DAY, "--config", str(config_file)])
        assert "2 open slot(s)" in result.stdout

    def test_book_accepts_hour_fractions(self, config_file):
        result = _book(config_file, start="9.5", end="10.5")

        assert result.exit_code == 0
        assert _bookings(config_file)[0]["startHour"] == 9.5

    def test_overlapping_booking_rejected(self, config_file):
        assert _book(config_file).exit_code == 0

        result = _book(config_file, start="10:30", end="11:30", email="sam@example.com")

        assert result.exit_code == 1
        assert "slot_taken" in result.stdout
        assert len(_bookings(config_file)) == 1

    def test_outside_hours_rejected(self, config_file):
        result = _book(config_file, start="11:30", end="12:30")

        assert result.exit_code == 1
        assert "outside_hours" in result.stdout

    def test_invalid_email(self, config_file):
        result = _book(config_file, email="nope")

        assert result.exit_code == 1
        assert "Invalid email" in result.stdout
        assert _bookings(config_file) == []

    def test_invalid_time(self, config_file):
        result = _book(config_file, start="25:00")

        assert result.exit_code == 1
        assert "Could not parse time" in result.stdout

    def test_cancel(self, config_file):
        _book(config_file)
        booking_id = _bookings(config_file)[0]["id"]

        result = runner.invoke(app, ["cancel", booking_id, "--config", str(config_file)])
        assert result.exit_code == 0
        assert _bookings(config_file)[0]["status"] == "cancelled"

        result = runner.invoke(app, ["cancel", booking_id, "--config", str(config_file)])
        assert result.exit_code == 1

    def test_unknown_calendar(self, config_file):
        result = runner.invoke(app, ["slots", "nope", DAY, "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Calendar not found" in result.stdout

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["calendars", "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.stdout

    def test_today_follows_calendar_timezone(self, config_file, monkeypatch):
        data_file = config_file.parent / "data.json"
        data = json.loads(data_file.read_text(encoding="utf-8"))
        data["calendars"][0]["timezone"] = "Pacific/Auckland"
        data_file.write_text(json.dumps(data), encoding="utf-8")

        requested = []
        real_today = pendulum.today

        def recording_today(tz="local"):
            requested.append(tz)
            return real_today(tz)

        monkeypatch.setattr(pendulum, "today", recording_today)

        result = runner.invoke(app, ["slots", "consulting", "today", "--config", str(config_file)])

        assert result.exit_code == 0
        assert requested == ["Pacific/Auckland"]

    def test_today_falls_back_to_config_timezone(self, config_file, monkeypatch):
        requested = []
        real_today = pendulum.today

        def recording_today(tz="local"):
            requested.append(tz)
            return real_today(tz)

        monkeypatch.setattr(pendulum, "today", recording_today)

        result = runner.invoke(app, ["slots", "nope", "today", "--config", str(config_file)])

        assert result.exit_code == 1
        assert requested == ["UTC"]

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout
