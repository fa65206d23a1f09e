"""
Domain models for availability windows, breaks and booked sessions.

All times are integer minutes since midnight (see ``time_codec``).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from .exceptions import InvalidWeekdayError, InvalidWindowError
from .time_codec import format_time, parse_time, validate_minutes

# Index 0 is Sunday, matching the weekday numbers used by break rules.
WEEKDAY_NAMES: Tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)


def weekday_index(day: date) -> int:
    """Return the weekday of ``day`` with 0 = Sunday and 6 = Saturday."""
    return day.isoweekday() % 7


def weekday_name(day: date) -> str:
    """Return the lowercase weekday name for ``day``."""
    return WEEKDAY_NAMES[weekday_index(day)]


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    A contiguous working interval within one day.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        validate_minutes(self.start)
        validate_minutes(self.end)
        if self.start >= self.end:
            raise InvalidWindowError(
                f"Window start {format_time(self.start)} must be before end {format_time(self.end)}"
            )

    @classmethod
    def from_strings(cls, start: str, end: str) -> "AvailabilityWindow":
        """Build a window from ``HH:MM`` strings."""
        return cls(start=parse_time(start), end=parse_time(end))

    def duration_minutes(self) -> int:
        """Return the length of the window in minutes."""
        return self.end - self.start

    def __str__(self) -> str:
        return f"{format_time(self.start)} - {format_time(self.end)}"


@dataclass(frozen=True)
class BreakRule:
    """
    A recurring break, applied only on the listed weekdays (0 = Sunday).
    """
    start: int
    end: int
    days: FrozenSet[int] = frozenset()

    def __post_init__(self):
        validate_minutes(self.start)
        validate_minutes(self.end)
        if self.start >= self.end:
            raise InvalidWindowError(
                f"Break start {format_time(self.start)} must be before end {format_time(self.end)}"
            )
        invalid_days = sorted(day for day in self.days if day not in range(7))
        if invalid_days:
            raise InvalidWeekdayError(
                f"Break days must be between 0 (Sunday) and 6 (Saturday), got {invalid_days}"
            )
        # Accept any iterable of days but store a frozenset
        object.__setattr__(self, "days", frozenset(self.days))

    @classmethod
    def from_strings(cls, start: str, end: str, days: Iterable[int]) -> "BreakRule":
        """Build a break rule from ``HH:MM`` strings."""
        return cls(start=parse_time(start), end=parse_time(end), days=frozenset(days))

    def applies_on(self, weekday: int) -> bool:
        """Check if the break is active on the given weekday."""
        return weekday in self.days

    def contains(self, minute: int) -> bool:
        """Check if a time falls inside the half-open break interval."""
        return self.start <= minute < self.end


@dataclass(frozen=True)
class BookedInterval:
    """
    An already reserved session on one calendar date.

    The engine only reads these; ownership stays with the caller.
    """
    start_time: int
    end_time: int

    @classmethod
    def from_strings(cls, start_time: str, end_time: str) -> "BookedInterval":
        """Build a booked interval from ``HH:MM`` strings."""
        return cls(start_time=parse_time(start_time), end_time=parse_time(end_time))

    def overlaps(self, start: int, end: int) -> bool:
        """Check if ``[start, end)`` overlaps this booking."""
        return start < self.end_time and end > self.start_time

    def __str__(self) -> str:
        return f"{format_time(self.start_time)} - {format_time(self.end_time)}"


@dataclass(frozen=True)
class WeeklyTemplate:
    """
    Recurring weekly working hours keyed by weekday name.

    Weekdays without an entry have no availability.
    """
    days: Mapping[str, Tuple[AvailabilityWindow, ...]] = field(default_factory=dict)

    def __post_init__(self):
        unknown = sorted(name for name in self.days if name not in WEEKDAY_NAMES)
        if unknown:
            raise InvalidWeekdayError(f"Unknown weekday name(s): {', '.join(unknown)}")
        frozen: Dict[str, Tuple[AvailabilityWindow, ...]] = {
            name: tuple(windows) for name, windows in self.days.items()
        }
        object.__setattr__(self, "days", frozen)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Iterable[Mapping[str, Any]]]) -> "WeeklyTemplate":
        """
        Build a template from plain data.

        Example:
            {"monday": [{"start": "09:00", "end": "12:00"}]}
        """
        days: Dict[str, Tuple[AvailabilityWindow, ...]] = {}
        for name, windows in data.items():
            days[name.lower()] = tuple(
                AvailabilityWindow.from_strings(window["start"], window["end"])
                for window in windows
            )
        return cls(days=days)

    def windows_for_weekday(self, name: str) -> Tuple[AvailabilityWindow, ...]:
        """Get the windows configured for a weekday name."""
        if name not in WEEKDAY_NAMES:
            raise InvalidWeekdayError(f"Unknown weekday name: {name}")
        return self.days.get(name, ())

    def windows_for(self, day: date) -> Tuple[AvailabilityWindow, ...]:
        """Get the windows that apply to a specific calendar date."""
        return self.windows_for_weekday(weekday_name(day))

    def working_weekdays(self) -> List[str]:
        """Weekday names with at least one window, in Sunday-first order."""
        return [name for name in WEEKDAY_NAMES if self.days.get(name)]
