"""
Constraint checks applied to every candidate slot.
"""

from typing import Iterable

from .models import BookedInterval, BreakRule


def is_booked(slot_start: int, slot_end: int, booked: Iterable[BookedInterval]) -> bool:
    """
    Check if a candidate slot overlaps any booked interval.

    Both intervals are half-open, so a slot ending exactly when a booking
    starts is still free.
    """
    return any(interval.overlaps(slot_start, slot_end) for interval in booked)


def is_during_break(minute: int, weekday: int, break_rules: Iterable[BreakRule]) -> bool:
    """
    Check if a time falls inside a break that applies on ``weekday``.

    Only the slot start is passed in here; a slot may begin just before a
    break and run into it.
    """
    return any(
        rule.applies_on(weekday) and rule.contains(minute)
        for rule in break_rules
    )
