"""
Domain-specific exception hierarchy for the slot engine.
"""


class SlotEngineError(Exception):
    """Base class for all application-level errors."""


class InvalidInputError(SlotEngineError, ValueError):
    """Raised when caller-supplied data violates a precondition."""


class InvalidTimeFormatError(InvalidInputError):
    """Raised when a wall-clock string is not a valid ``HH:MM`` time."""


class InvalidDurationError(InvalidInputError):
    """Raised when a slot duration is not a positive integer of minutes."""


class InvalidWindowError(InvalidInputError):
    """Raised when a window or break does not start before it ends."""


class InvalidWeekdayError(InvalidInputError):
    """Raised when a weekday index or name is unknown."""


class InvalidMonthError(InvalidInputError):
    """Raised when a month number is outside 1..12."""


class DayOverflowError(InvalidInputError):
    """Raised when time arithmetic leaves the current day."""


class ExpertNotFoundError(SlotEngineError):
    """Raised when no expert profile matches the requested identifier."""


class BookingDataError(SlotEngineError):
    """Raised when booked sessions cannot be loaded or parsed."""
