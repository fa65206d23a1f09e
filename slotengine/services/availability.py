"""
Application services answering availability queries for experts.

The service resolves an expert profile, fetches booked sessions via a
booking source adapter and delegates the actual slot computation to the
domain-level ``SlotCalculator``. Results are serialised to strings here,
at the boundary, so the domain keeps working with minutes and dates.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, List, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..config import DefaultsConfig, ExpertProfile
from ..domain.exceptions import ExpertNotFoundError, InvalidMonthError
from ..domain.models import BookedInterval, BreakRule
from ..domain.slot_calculator import SlotCalculator
from ..domain.time_codec import format_time

logger = logging.getLogger(__name__)


class BookingSourceProtocol(Protocol):
    """Protocol describing the booking source behaviour needed by the service."""

    async def get_booked_intervals(
        self,
        expert_id: str,
        start: date,
        end: date,
    ) -> Dict[date, List[BookedInterval]]:
        """Return booked intervals per date, both bounds inclusive."""


class AvailabilityService:
    """
    Orchestrates booking retrieval and slot calculation for experts.

    Dependency inversion toward a protocol makes it easy to plug in a
    database-backed source or the in-memory store in tests.
    """

    def __init__(
        self,
        experts: Sequence[ExpertProfile],
        booking_source: BookingSourceProtocol,
        defaults: DefaultsConfig | None = None,
        calculator_factory: Callable[[Sequence[BreakRule]], SlotCalculator] = SlotCalculator,
    ) -> None:
        self._experts = list(experts)
        self._booking_source = booking_source
        self._defaults = defaults or DefaultsConfig()
        self._calculator_factory = calculator_factory

    def get_expert(self, expert_id: str) -> ExpertProfile:
        """Look up an expert profile by id."""
        for expert in self._experts:
            if expert.id == expert_id:
                return expert
        raise ExpertNotFoundError(f"Expert not found: {expert_id}")

    async def available_slots(
        self,
        *,
        expert_id: str,
        target_date: date,
        now: DateTime,
        duration_minutes: int | None = None,
    ) -> List[str]:
        """
        List bookable start times (``HH:MM``) for one expert on one date.
        """
        expert = self.get_expert(expert_id)
        duration = self._resolve_duration(expert, duration_minutes)
        day = pendulum.date(target_date.year, target_date.month, target_date.day)

        booked_by_date = await self.fetch_booked_intervals(
            expert_id=expert.id,
            start=day,
            end=day,
        )

        calculator = self._calculator_factory(expert.to_break_rules())
        slots = calculator.generate_slots(
            windows=expert.to_template().windows_for(day),
            duration_minutes=duration,
            booked=booked_by_date[date(day.year, day.month, day.day)],
            target_date=day,
            now=now,
        )

        logger.debug(
            "Expert %s has %d free %d-minute slots on %s",
            expert.id, len(slots), duration, day.to_date_string(),
        )
        return [format_time(slot) for slot in slots]

    async def available_dates(
        self,
        *,
        expert_id: str,
        year: int,
        month: int,
        now: DateTime,
        duration_minutes: int | None = None,
    ) -> List[str]:
        """
        List dates (``YYYY-MM-DD``) in a month with at least one free slot.
        """
        if not 1 <= month <= 12:
            raise InvalidMonthError(f"Month must be between 1 and 12, got {month}")

        expert = self.get_expert(expert_id)
        duration = self._resolve_duration(expert, duration_minutes)
        first_day = pendulum.date(year, month, 1)
        last_day = first_day.end_of("month")

        booked_by_date = await self.fetch_booked_intervals(
            expert_id=expert.id,
            start=first_day,
            end=last_day,
        )

        calculator = self._calculator_factory(expert.to_break_rules())
        dates = calculator.scan_month(
            year=year,
            month=month,
            template=expert.to_template(),
            duration_minutes=duration,
            booked_by_date=booked_by_date,
            now=now,
        )

        logger.debug(
            "Expert %s has %d bookable dates in %04d-%02d",
            expert.id, len(dates), year, month,
        )
        return [day.to_date_string() for day in dates]

    async def fetch_booked_intervals(
        self,
        *,
        expert_id: str,
        start: date,
        end: date,
    ) -> Dict[date, List[BookedInterval]]:
        """Fetch booked intervals for every date between ``start`` and ``end``."""
        booked = await self._booking_source.get_booked_intervals(
            expert_id=expert_id,
            start=start,
            end=end,
        )

        return self._ensure_date_entries(start, end, booked)

    def _resolve_duration(self, expert: ExpertProfile, duration_minutes: int | None) -> int:
        if duration_minutes is not None:
            return duration_minutes
        return expert.effective_duration(self._defaults)

    @staticmethod
    def _ensure_date_entries(
        start: date,
        end: date,
        booked: Dict[date, List[BookedInterval]],
    ) -> Dict[date, List[BookedInterval]]:
        """
        Ensure every date in the range appears in the booked-interval map.

        Sources usually omit dates without sessions; we normalise that to an
        explicit empty list for deterministic downstream behaviour.
        """
        normalized: Dict[date, List[BookedInterval]] = {}

        for key, intervals in booked.items():
            normalized[date(key.year, key.month, key.day)] = list(intervals)

        current = pendulum.date(start.year, start.month, start.day)
        while current <= end:
            normalized.setdefault(date(current.year, current.month, current.day), [])
            current = current.add(days=1)

        return normalized
