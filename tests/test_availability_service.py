"""
Tests for the AvailabilityService orchestration layer.
"""

import asyncio
from datetime import date
from typing import Dict, List

import pendulum
import pytest

from slotengine.adapters.booking_store import InMemoryBookingStore
from slotengine.config import DefaultsConfig, ExpertProfile
from slotengine.domain.exceptions import ExpertNotFoundError, InvalidMonthError
from slotengine.domain.models import BookedInterval
from slotengine.services.availability import AvailabilityService

TZ = "Asia/Kolkata"


class StubBookingSource:
    """Minimal stub matching BookingSourceProtocol."""

    def __init__(self, bookings: Dict[date, List[BookedInterval]]):
        self._bookings = bookings
        self.calls: List[Dict[str, str]] = []

    async def get_booked_intervals(self, expert_id, start, end):
        self.calls.append(
            {
                "expert_id": expert_id,
                "start": start.isoformat(),
                "end": end.isoformat(),
            }
        )
        return self._bookings


def _expert(**overrides) -> ExpertProfile:
    data = {
        "id": "exp-1",
        "name": "Dr. Rao",
        "availability": {"monday": [{"start": "09:00", "end": "12:00"}]},
        "break_times": [{"start": "11:00", "end": "11:30", "days": [1]}],
    }
    data.update(overrides)
    return ExpertProfile(**data)


def _build_service(bookings: Dict[date, List[BookedInterval]], **expert_overrides):
    source = StubBookingSource(bookings)
    service = AvailabilityService(experts=[_expert(**expert_overrides)], booking_source=source)
    return service, source


def test_available_slots_formats_times():
    """Bookings and breaks are applied and start times serialised as HH:MM."""
    service, source = _build_service(
        {date(2024, 11, 25): [BookedInterval.from_strings("10:00", "11:00")]}
    )

    slots = asyncio.run(
        service.available_slots(
            expert_id="exp-1",
            target_date=pendulum.date(2024, 11, 25),
            now=pendulum.datetime(2024, 11, 20, 8, 0, tz=TZ),
        )
    )

    assert slots == ["09:00"]
    assert source.calls == [
        {"expert_id": "exp-1", "start": "2024-11-25", "end": "2024-11-25"}
    ]


def test_available_slots_uses_explicit_duration():
    """An explicit duration overrides the expert's configured one."""
    service, _ = _build_service({}, slot_duration=60)

    slots = asyncio.run(
        service.available_slots(
            expert_id="exp-1",
            target_date=date(2024, 11, 25),
            now=pendulum.datetime(2024, 11, 20, 8, 0, tz=TZ),
            duration_minutes=30,
        )
    )

    assert slots == ["09:00", "09:30", "10:00", "10:30", "11:30"]


def test_default_duration_comes_from_defaults():
    """Experts without their own duration fall back to the defaults."""
    source = StubBookingSource({})
    service = AvailabilityService(
        experts=[_expert()],
        booking_source=source,
        defaults=DefaultsConfig(slot_duration=30),
    )

    slots = asyncio.run(
        service.available_slots(
            expert_id="exp-1",
            target_date=date(2024, 11, 25),
            now=pendulum.datetime(2024, 11, 20, 8, 0, tz=TZ),
        )
    )

    assert len(slots) == 5


def test_available_slots_on_unconfigured_weekday():
    """A weekday without working hours has no slots."""
    service, _ = _build_service({})

    slots = asyncio.run(
        service.available_slots(
            expert_id="exp-1",
            target_date=date(2024, 11, 26),
            now=pendulum.datetime(2024, 11, 20, 8, 0, tz=TZ),
        )
    )

    assert slots == []


def test_available_dates_skips_fully_booked_days():
    """Month queries return ISO dates with at least one free slot."""
    full_day = [BookedInterval.from_strings("09:00", "12:00")]
    service, source = _build_service({date(2024, 11, 18): full_day})

    dates = asyncio.run(
        service.available_dates(
            expert_id="exp-1",
            year=2024,
            month=11,
            now=pendulum.datetime(2024, 11, 12, 8, 0, tz=TZ),
        )
    )

    assert dates == ["2024-11-25"]
    assert source.calls[0]["start"] == "2024-11-01"
    assert source.calls[0]["end"] == "2024-11-30"


def test_available_dates_rejects_invalid_month():
    """Invalid months fail before any booking lookup."""
    service, source = _build_service({})

    with pytest.raises(InvalidMonthError):
        asyncio.run(
            service.available_dates(
                expert_id="exp-1",
                year=2024,
                month=13,
                now=pendulum.datetime(2024, 11, 12, 8, 0, tz=TZ),
            )
        )
    assert source.calls == []


def test_unknown_expert_raises():
    """Unknown expert ids are reported, not treated as empty availability."""
    service, _ = _build_service({})

    with pytest.raises(ExpertNotFoundError):
        asyncio.run(
            service.available_slots(
                expert_id="nobody",
                target_date=date(2024, 11, 25),
                now=pendulum.datetime(2024, 11, 20, 8, 0, tz=TZ),
            )
        )


def test_fetch_booked_intervals_includes_every_date():
    """Dates without sessions should still appear in the map."""
    service, _ = _build_service(
        {pendulum.date(2024, 11, 2): [BookedInterval.from_strings("09:00", "10:00")]}
    )

    booked = asyncio.run(
        service.fetch_booked_intervals(
            expert_id="exp-1",
            start=date(2024, 11, 1),
            end=date(2024, 11, 3),
        )
    )

    assert set(booked.keys()) == {date(2024, 11, 1), date(2024, 11, 2), date(2024, 11, 3)}
    assert booked[date(2024, 11, 1)] == []
    assert len(booked[date(2024, 11, 2)]) == 1


def test_in_memory_store_integration():
    """The in-memory store plugs into the service."""
    store = InMemoryBookingStore()
    store.add("exp-1", date(2024, 11, 25), BookedInterval.from_strings("09:00", "10:00"))
    service = AvailabilityService(experts=[_expert()], booking_source=store)

    slots = asyncio.run(
        service.available_slots(
            expert_id="exp-1",
            target_date=date(2024, 11, 25),
            now=pendulum.datetime(2024, 11, 20, 8, 0, tz=TZ),
        )
    )

    assert slots == ["10:00"]
