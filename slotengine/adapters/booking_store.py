"""
Booked-session sources backed by a JSON file or plain memory.
"""

import json
import logging
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pendulum

from ..domain.exceptions import BookingDataError, InvalidInputError
from ..domain.models import BookedInterval

logger = logging.getLogger(__name__)

# Every status a session record may carry
KNOWN_STATUSES = frozenset({"pending", "confirmed", "completed", "cancelled", "refunded"})

# Sessions in these states hold their time; cancelled or completed ones do not
BLOCKING_STATUSES = frozenset({"pending", "confirmed"})


class InMemoryBookingStore:
    """
    Booking source holding booked intervals per expert and date.

    Useful when the caller already has the data loaded, and in tests.
    """

    def __init__(
        self,
        bookings: Optional[Mapping[str, Mapping[date, Sequence[BookedInterval]]]] = None
    ):
        self._bookings: Dict[str, Dict[date, List[BookedInterval]]] = defaultdict(dict)
        for expert_id, by_date in (bookings or {}).items():
            for day, intervals in by_date.items():
                self._bookings[expert_id][_as_date(day)] = list(intervals)

    def add(self, expert_id: str, day: date, interval: BookedInterval) -> None:
        """Register one booked interval."""
        self._bookings[expert_id].setdefault(_as_date(day), []).append(interval)

    async def get_booked_intervals(
        self,
        expert_id: str,
        start: date,
        end: date
    ) -> Dict[date, List[BookedInterval]]:
        """
        Return booked intervals for ``expert_id`` between two dates, inclusive.
        """
        by_date = self._bookings.get(expert_id, {})
        return {
            day: list(intervals)
            for day, intervals in by_date.items()
            if _as_date(start) <= day <= _as_date(end)
        }


class JsonBookingStore(InMemoryBookingStore):
    """
    Booking source that loads session records from a JSON file.

    Expected format - a list of records:
        [
            {
                "expertId": "exp-1",
                "date": "2024-11-25",
                "startTime": "10:00",
                "endTime": "11:00",
                "status": "confirmed"
            }
        ]

    Only pending and confirmed sessions block time. A record without a
    status counts as confirmed; an unrecognised status is an error. A
    missing file is treated as "no bookings"; a malformed one raises
    ``BookingDataError``.
    """

    def __init__(self, data_file: Path):
        super().__init__()
        self.data_file = data_file
        self._load_records(self._read_file())

    def _read_file(self) -> List[Dict[str, Any]]:
        if not self.data_file.exists():
            logger.debug("Booking file %s does not exist; starting empty", self.data_file)
            return []

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise BookingDataError(f"Could not read bookings from {self.data_file}: {exc}") from exc

        if not isinstance(records, list):
            raise BookingDataError(f"Bookings file {self.data_file} must contain a list of sessions")
        return records

    def _load_records(self, records: Iterable[Dict[str, Any]]) -> None:
        loaded = 0
        for index, record in enumerate(records):
            try:
                status = record.get("status", "confirmed")
                if not isinstance(status, str) or status.lower() not in KNOWN_STATUSES:
                    raise BookingDataError(
                        f"Invalid session record #{index} in {self.data_file}: unknown status {status!r}"
                    )
                if status.lower() not in BLOCKING_STATUSES:
                    continue

                day = pendulum.from_format(record["date"], "YYYY-MM-DD").date()
                interval = BookedInterval.from_strings(record["startTime"], record["endTime"])
                self.add(str(record["expertId"]), day, interval)
                loaded += 1

            except (AttributeError, KeyError, TypeError, ValueError, InvalidInputError) as exc:
                raise BookingDataError(
                    f"Invalid session record #{index} in {self.data_file}: {exc}"
                ) from exc

        logger.debug("Loaded %d blocking sessions from %s", loaded, self.data_file)


def _as_date(value: date) -> date:
    return date(value.year, value.month, value.day)
