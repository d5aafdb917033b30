"""
Recurring availability rules: which calendar days are bookable and which
slot boundaries exist on them.

Pure domain logic, no knowledge of existing bookings and no I/O.
"""

from datetime import date
from typing import List, Optional

import pendulum
from pendulum import DateTime

from .hours import calendar_day, slot_boundary, weekday_index
from .models import CalendarRules, ClosureReason, Slot


class AvailabilityPolicy:
    """
    Answers "is this day bookable" and "what slots exist on it".

    Algorithm for candidate slots:
    1. Reject closed days (disabled date, closed weekday, past day)
    2. Step from the opening hour by the slot duration
    3. Emit every slot whose end fits inside the open window
    4. Drop the trailing partial slot instead of truncating it
    """

    @staticmethod
    def now(rules: CalendarRules) -> DateTime:
        """Current instant on the calendar's own clock."""
        return pendulum.now(rules.timezone)

    @classmethod
    def today(cls, rules: CalendarRules) -> date:
        return calendar_day(cls.now(rules))

    def closure_reason(
        self,
        rules: CalendarRules,
        day: date,
        today: Optional[date] = None
    ) -> Optional[ClosureReason]:
        """
        Explain why ``day`` is closed, or return None when it is open.

        Checks run in a fixed order: disabled date, weekday, past day.
        """
        day = calendar_day(day)

        if day in rules.disabled_dates:
            return ClosureReason.DISABLED_DATE

        if weekday_index(day) not in rules.weekdays_open:
            return ClosureReason.WEEKDAY_CLOSED

        if today is None:
            today = self.today(rules)

        if day < calendar_day(today):
            return ClosureReason.PAST_DATE

        return None

    def is_day_open(
        self,
        rules: CalendarRules,
        day: date,
        today: Optional[date] = None
    ) -> bool:
        return self.closure_reason(rules, day, today) is None

    def candidate_slots(
        self,
        rules: CalendarRules,
        day: date,
        today: Optional[date] = None
    ) -> List[Slot]:
        """
        Enumerate the slots of ``day`` in ascending order.

        Returns an empty list for closed days. Each boundary is computed
        from its index, never by accumulating the step.
        """
        if not self.is_day_open(rules, day, today):
            return []

        return self.generate_slots(rules)

    @staticmethod
    def generate_slots(rules: CalendarRules) -> List[Slot]:
        """All slots of the open window, regardless of the day."""
        start = rules.hours_open.start
        end = rules.hours_open.end
        minutes = rules.slot_duration_minutes

        slots: List[Slot] = []
        index = 0

        while True:
            slot_end = slot_boundary(start, index + 1, minutes)
            if slot_end > end:
                break

            slots.append(
                Slot(start_hour=slot_boundary(start, index, minutes), end_hour=slot_end)
            )
            index += 1

        return slots
