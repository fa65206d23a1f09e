"""
Tests for domain models.
"""

import pendulum
import pytest

from slotengine.domain.exceptions import InvalidTimeFormatError, InvalidWeekdayError, InvalidWindowError
from slotengine.domain.models import (
    AvailabilityWindow,
    BookedInterval,
    BreakRule,
    WeeklyTemplate,
    weekday_index,
    weekday_name,
)


class TestAvailabilityWindow:
    """Tests for AvailabilityWindow model."""

    def test_create_valid_window(self):
        """Test creating a valid window from strings."""
        window = AvailabilityWindow.from_strings("09:00", "17:00")

        assert window.start == 540
        assert window.end == 1020
        assert window.duration_minutes() == 480
        assert str(window) == "09:00 - 17:00"

    def test_invalid_window_raises_error(self):
        """Test that a window ending before it starts is rejected."""
        with pytest.raises(InvalidWindowError, match="must be before end"):
            AvailabilityWindow.from_strings("17:00", "09:00")

    def test_empty_window_raises_error(self):
        """Test that a zero-length window is rejected."""
        with pytest.raises(InvalidWindowError):
            AvailabilityWindow(start=600, end=600)

    def test_out_of_range_minutes(self):
        """Test that minutes outside one day are rejected."""
        with pytest.raises(InvalidTimeFormatError):
            AvailabilityWindow(start=1400, end=1500)

    def test_window_is_immutable(self):
        """Test that windows cannot be changed after creation."""
        window = AvailabilityWindow(start=540, end=600)
        with pytest.raises(AttributeError):
            window.start = 0


class TestBreakRule:
    """Tests for BreakRule model."""

    def test_applies_only_on_listed_days(self):
        """Test weekday scoping of breaks."""
        rule = BreakRule.from_strings("12:00", "13:00", [1, 3])

        assert rule.applies_on(1)
        assert rule.applies_on(3)
        assert not rule.applies_on(0)
        assert rule.days == frozenset({1, 3})

    def test_contains_is_half_open(self):
        """Test that the break end is excluded."""
        rule = BreakRule.from_strings("12:00", "13:00", [1])

        assert rule.contains(720)
        assert rule.contains(779)
        assert not rule.contains(780)
        assert not rule.contains(719)

    def test_invalid_days(self):
        """Test that weekday numbers outside 0..6 are rejected."""
        with pytest.raises(InvalidWeekdayError):
            BreakRule.from_strings("12:00", "13:00", [7])

    def test_invalid_order(self):
        """Test that a break must start before it ends."""
        with pytest.raises(InvalidWindowError):
            BreakRule.from_strings("13:00", "12:00", [1])


class TestBookedInterval:
    """Tests for BookedInterval overlap detection."""

    def test_overlaps(self):
        """Test overlap detection with half-open intervals."""
        booked = BookedInterval.from_strings("10:00", "11:00")

        assert booked.overlaps(570, 630)    # 09:30-10:30
        assert booked.overlaps(600, 660)    # exact match
        assert booked.overlaps(610, 620)    # contained
        assert not booked.overlaps(540, 600)  # ends when booking starts
        assert not booked.overlaps(660, 720)  # starts when booking ends


class TestWeekdays:
    """Tests for weekday helpers."""

    def test_weekday_index_starts_on_sunday(self):
        """Test that Sunday is 0 and Saturday is 6."""
        assert weekday_index(pendulum.date(2024, 11, 24)) == 0  # Sunday
        assert weekday_index(pendulum.date(2024, 11, 25)) == 1  # Monday
        assert weekday_index(pendulum.date(2024, 11, 30)) == 6  # Saturday

    def test_weekday_name(self):
        """Test weekday names."""
        assert weekday_name(pendulum.date(2024, 11, 25)) == "monday"
        assert weekday_name(pendulum.date(2024, 11, 24)) == "sunday"


class TestWeeklyTemplate:
    """Tests for WeeklyTemplate model."""

    def test_from_mapping(self):
        """Test building a template from plain data."""
        template = WeeklyTemplate.from_mapping({
            "Monday": [{"start": "09:00", "end": "12:00"}, {"start": "14:00", "end": "17:00"}],
            "friday": [],
        })

        monday = pendulum.date(2024, 11, 25)
        assert template.windows_for(monday) == (
            AvailabilityWindow(start=540, end=720),
            AvailabilityWindow(start=840, end=1020),
        )
        assert template.working_weekdays() == ["monday"]

    def test_missing_day_has_no_windows(self):
        """Test that unconfigured weekdays are empty."""
        template = WeeklyTemplate.from_mapping({"monday": [{"start": "09:00", "end": "12:00"}]})

        assert template.windows_for(pendulum.date(2024, 11, 26)) == ()

    def test_unknown_weekday(self):
        """Test that unknown weekday names are rejected."""
        with pytest.raises(InvalidWeekdayError):
            WeeklyTemplate.from_mapping({"funday": []})
