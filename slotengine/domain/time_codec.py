"""
Conversion between ``HH:MM`` wall-clock strings and minutes since midnight.

Every other part of the engine works on integer minutes; strings only
appear at the edges (configuration, booking documents, output).
"""

from .exceptions import DayOverflowError, InvalidTimeFormatError

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR


def parse_time(value: str) -> int:
    """
    Parse an ``HH:MM`` string into minutes since midnight.

    Args:
        value: Wall-clock time such as ``"09:30"``

    Returns:
        Minutes since midnight in the range [0, 1440)

    Raises:
        InvalidTimeFormatError: If the string is malformed or out of range
    """
    if not isinstance(value, str):
        raise InvalidTimeFormatError(f"Time must be a string in HH:MM format, got {value!r}")

    parts = value.split(":")
    if len(parts) != 2 or not all(part.isascii() and part.isdigit() for part in parts):
        raise InvalidTimeFormatError(f"Time must be in HH:MM format, got {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    if not 0 <= hours <= 23:
        raise InvalidTimeFormatError(f"Hour must be between 0 and 23, got {hours} in {value!r}")
    if not 0 <= minutes <= 59:
        raise InvalidTimeFormatError(f"Minute must be between 0 and 59, got {minutes} in {value!r}")

    return hours * MINUTES_PER_HOUR + minutes


def validate_minutes(minutes: int) -> int:
    """Ensure a value is an integer minute of the day and return it."""
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise InvalidTimeFormatError(f"Minutes must be an integer, got {minutes!r}")
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormatError(
            f"Minutes must be between 0 and {MINUTES_PER_DAY - 1}, got {minutes}"
        )
    return minutes


def format_time(minutes: int) -> str:
    """Format minutes since midnight as a zero-padded ``HH:MM`` string."""
    validate_minutes(minutes)
    hours, mins = divmod(minutes, MINUTES_PER_HOUR)
    return f"{hours:02d}:{mins:02d}"


def add_minutes(value: str, minutes_to_add: int) -> str:
    """
    Shift an ``HH:MM`` time by a number of minutes within the same day.

    Raises:
        InvalidTimeFormatError: If ``value`` is not a valid time
        DayOverflowError: If the result falls before 00:00 or after 23:59
    """
    total = parse_time(value) + minutes_to_add
    if not 0 <= total < MINUTES_PER_DAY:
        raise DayOverflowError(
            f"Adding {minutes_to_add} minutes to {value} leaves the day"
        )
    return format_time(total)
