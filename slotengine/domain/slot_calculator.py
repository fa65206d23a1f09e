"""
Core business logic for calculating bookable session slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O). The current
time is always passed in so results are reproducible.
"""

from datetime import date, datetime
from typing import List, Mapping, Optional, Sequence

import pendulum
from pendulum import Date

from .checks import is_booked, is_during_break
from .exceptions import InvalidDurationError, InvalidMonthError
from .models import AvailabilityWindow, BookedInterval, BreakRule, WeeklyTemplate, weekday_index


def validate_duration(duration_minutes: int) -> int:
    """Ensure a slot duration is a positive integer of minutes."""
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise InvalidDurationError(
            f"Slot duration must be an integer number of minutes, got {duration_minutes!r}"
        )
    if duration_minutes <= 0:
        raise InvalidDurationError(
            f"Slot duration must be greater than zero, got {duration_minutes}"
        )
    return duration_minutes


class SlotCalculator:
    """
    Calculates bookable start times for one expert.

    Algorithm for a single day:
    1. Walk each availability window in steps of the session duration
    2. Drop slots that already started when the date is today
    3. Drop slots overlapping a booked session
    4. Drop slots starting inside a break for that weekday
    5. Concatenate the remaining start times window by window
    """

    def __init__(self, break_rules: Sequence[BreakRule] = ()):
        self.break_rules = tuple(break_rules)

    def generate_slots(
        self,
        windows: Sequence[AvailabilityWindow],
        duration_minutes: int,
        booked: Sequence[BookedInterval],
        target_date: date,
        now: datetime,
        weekday: Optional[int] = None
    ) -> List[int]:
        """
        Generate available slot start times for a single day.

        Args:
            windows: Working windows for the day, processed in order
            duration_minutes: Length of every slot
            booked: Sessions already booked on ``target_date``
            target_date: The calendar date being queried
            now: Current time used for the past-slot filter
            weekday: Weekday index (0 = Sunday); derived from the date if omitted

        Returns:
            Start times in minutes since midnight. Windows that overlap each
            other may produce the same start time twice.

        Raises:
            InvalidDurationError: If the duration is not a positive integer
        """
        validate_duration(duration_minutes)

        if weekday is None:
            weekday = weekday_index(target_date)

        is_today = self._same_day(target_date, now)
        available: List[int] = []

        for window in windows:
            current = window.start

            while current + duration_minutes <= window.end:
                slot_start = current
                slot_end = current + duration_minutes
                current += duration_minutes

                if is_today and self._has_started(slot_start, now):
                    continue

                if is_booked(slot_start, slot_end, booked):
                    continue

                if is_during_break(slot_start, weekday, self.break_rules):
                    continue

                available.append(slot_start)

        return available

    def has_available_slots(
        self,
        target_date: date,
        windows: Sequence[AvailabilityWindow],
        duration_minutes: int,
        booked: Sequence[BookedInterval],
        now: datetime
    ) -> bool:
        """Check if at least one slot can be booked on ``target_date``."""
        slots = self.generate_slots(
            windows=windows,
            duration_minutes=duration_minutes,
            booked=booked,
            target_date=target_date,
            now=now
        )
        return len(slots) > 0

    def scan_month(
        self,
        year: int,
        month: int,
        template: WeeklyTemplate,
        duration_minutes: int,
        booked_by_date: Mapping[date, Sequence[BookedInterval]],
        now: datetime
    ) -> List[Date]:
        """
        Find every date in a month with at least one bookable slot.

        Args:
            year: Calendar year
            month: Month number, 1 = January
            template: Weekly working hours
            duration_minutes: Length of every slot
            booked_by_date: Booked sessions keyed by date; absent dates are free
            now: Current time; dates before today are never returned

        Returns:
            Dates in ascending order
        """
        validate_duration(duration_minutes)
        if not 1 <= month <= 12:
            raise InvalidMonthError(f"Month must be between 1 and 12, got {month}")

        first_day = pendulum.date(year, month, 1)
        today = now.date()
        available_dates: List[Date] = []

        for offset in range(first_day.days_in_month):
            current = first_day.add(days=offset)

            if current < today:
                continue

            windows = template.windows_for(current)
            if not windows:
                continue

            booked = self._booked_on(booked_by_date, current)

            if self.has_available_slots(
                target_date=current,
                windows=windows,
                duration_minutes=duration_minutes,
                booked=booked,
                now=now
            ):
                available_dates.append(current)

        return available_dates

    @staticmethod
    def _same_day(target_date: date, now: datetime) -> bool:
        return (
            target_date.year == now.year
            and target_date.month == now.month
            and target_date.day == now.day
        )

    @staticmethod
    def _has_started(slot_start: int, now: datetime) -> bool:
        """Check if a slot on today's date starts at or before ``now``."""
        # Wall-clock comparison; works for any datetime and ignores DST gaps
        elapsed_seconds = now.hour * 3600 + now.minute * 60 + now.second
        return slot_start * 60 <= elapsed_seconds

    @staticmethod
    def _booked_on(
        booked_by_date: Mapping[date, Sequence[BookedInterval]],
        day: Date
    ) -> Sequence[BookedInterval]:
        return booked_by_date.get(date(day.year, day.month, day.day), ())
