"""
Domain layer - Pure business logic without external dependencies.
"""

from .checks import is_booked, is_during_break
from .models import (
    AvailabilityWindow,
    BookedInterval,
    BreakRule,
    WeeklyTemplate,
    WEEKDAY_NAMES,
    weekday_index,
    weekday_name,
)
from .slot_calculator import SlotCalculator, validate_duration
from .time_codec import add_minutes, format_time, parse_time

__all__ = [
    "AvailabilityWindow",
    "BookedInterval",
    "BreakRule",
    "WeeklyTemplate",
    "WEEKDAY_NAMES",
    "weekday_index",
    "weekday_name",
    "SlotCalculator",
    "validate_duration",
    "is_booked",
    "is_during_break",
    "add_minutes",
    "format_time",
    "parse_time",
]
