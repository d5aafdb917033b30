"""
JSON file datastore used by the command line interface.
"""

import fcntl
import json
import logging
import os
import tempfile
import uuid
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterator, List

from pydantic import ValidationError

from ..config import CalendarConfig
from ..domain.models import Booking, Calendar, CalendarRules
from .memory_store import InMemoryBookingStore

logger = logging.getLogger(__name__)


class JsonBookingStore(InMemoryBookingStore):
    """
    Store that keeps calendars and bookings in a single JSON document.

    File format:
    {
        "calendars": [{"id": "...", "name": "...", "availableDays": [1, 2], ...}],
        "bookings": [{"id": "...", "calendarRef": "...", "date": "2024-11-25", ...}]
    }

    Several processes may share one data file. Every write holds an exclusive
    lock on ``<data_file>.lock``, re-reads the file, checks uniqueness against
    that fresh copy and rewrites the file atomically before releasing it.
    """

    def __init__(self, data_file: Path):
        super().__init__()
        self.data_file = Path(data_file)
        self.lock_file = self.data_file.with_name(self.data_file.name + ".lock")
        self._refresh()

    @contextmanager
    def _locked(self, shared: bool = False) -> Iterator[None]:
        """Hold an advisory lock on the data file for the duration of the block."""
        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_file, "a") as handle:
            fcntl.flock(handle, fcntl.LOCK_SH if shared else fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)

    def _load(self) -> None:
        """Replace the in-memory state with the data file's content."""
        self.calendars = {}
        self.bookings = {}

        if not self.data_file.exists():
            logger.info("Data file %s does not exist yet, starting empty", self.data_file)
            return

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ValueError(f"Data file {self.data_file} must contain an object at the top level")

        try:
            for item in raw.get("calendars", []):
                self.put_calendar(CalendarConfig(**item).to_calendar())
        except ValidationError as exc:
            raise ValueError(f"Invalid calendar in {self.data_file}: {exc}") from exc

        for item in raw.get("bookings", []):
            try:
                booking = Booking.from_dict(item)
            except (KeyError, ValueError) as exc:
                raise ValueError(f"Invalid booking in {self.data_file}: {exc}") from exc
            if booking.id is None:
                booking = booking.with_id(uuid.uuid4().hex)
            self.bookings[booking.id] = booking

        logger.debug(
            "Loaded %d calendar(s) and %d booking(s) from %s",
            len(self.calendars), len(self.bookings), self.data_file
        )

    def _save(self) -> None:
        data = {
            "calendars": [
                CalendarConfig.from_calendar(c).model_dump(mode="json", by_alias=True)
                for c in self.calendars.values()
            ],
            "bookings": [b.to_dict() for b in self.bookings.values()],
        }

        folder = self.data_file.parent.resolve()
        folder.mkdir(parents=True, exist_ok=True)

        # Atomic write
        with tempfile.NamedTemporaryFile(
            "w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp"
        ) as tf:
            json.dump(data, tf, ensure_ascii=False, indent=2)
            tmp_name = tf.name

        os.replace(tmp_name, self.data_file)

    def _refresh(self) -> None:
        with self._locked(shared=True):
            self._load()

    async def fetch_calendar(self, calendar_ref: str) -> Calendar:
        self._refresh()
        return await super().fetch_calendar(calendar_ref)

    async def fetch_calendar_rules(self, calendar_ref: str) -> CalendarRules:
        self._refresh()
        return await super().fetch_calendar_rules(calendar_ref)

    async def fetch_confirmed_bookings(self, calendar_ref: str, day: date) -> List[Booking]:
        self._refresh()
        return await super().fetch_confirmed_bookings(calendar_ref, day)

    async def fetch_bookings(self, calendar_ref: str) -> List[Booking]:
        self._refresh()
        return await super().fetch_bookings(calendar_ref)

    async def fetch_booking(self, booking_id: str) -> Booking:
        self._refresh()
        return await super().fetch_booking(booking_id)

    async def insert_booking(self, candidate: Booking) -> Booking:
        with self._locked():
            self._load()
            booking = await super().insert_booking(candidate)
            self._save()
        return booking

    async def update_booking(self, booking: Booking) -> Booking:
        with self._locked():
            self._load()
            updated = await super().update_booking(booking)
            self._save()
        return updated
