"""Persistence boundary: the store protocol and an in-memory reference store."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Protocol

from slot_booking.allocation import check_no_double_booking
from slot_booking.dates import to_day
from slot_booking.types import Booking, BookingConflictError

logger = logging.getLogger(__name__)


class BookingStore(Protocol):
    """What the booking flow needs from persistence."""

    def query_occupancy(
        self,
        dates: Iterable[date | str],
        slot_ids: Iterable[str],
    ) -> dict[date, set[str]]:
        """date -> committed slot ids, restricted to ``dates`` x ``slot_ids``."""
        ...

    def commit_bookings(self, bookings: list[Booking]) -> None:
        """Write all bookings or none. Raises BookingConflictError."""
        ...


class InMemoryBookingStore:
    """Dict-backed store keyed on (date, slot_id).

    The key is the uniqueness constraint: a commit that would create a second
    row for any key writes nothing and raises BookingConflictError.
    """

    def __init__(self, bookings: Iterable[Booking] = ()) -> None:
        self._rows: dict[tuple[date, str], Booking] = {}
        initial = list(bookings)
        if initial:
            self.commit_bookings(initial)

    def __len__(self) -> int:
        return len(self._rows)

    def query_occupancy(
        self,
        dates: Iterable[date | str],
        slot_ids: Iterable[str],
    ) -> dict[date, set[str]]:
        wanted_dates = {to_day(d) for d in dates}
        wanted_slots = set(slot_ids)
        occupancy: dict[date, set[str]] = {}
        for day, slot_id in self._rows:
            if day in wanted_dates and slot_id in wanted_slots:
                occupancy.setdefault(day, set()).add(slot_id)
        return occupancy

    def commit_bookings(self, bookings: list[Booking]) -> None:
        conflicts = check_no_double_booking(bookings)
        conflicts.extend(b.key for b in bookings if b.key in self._rows)
        if conflicts:
            logger.warning("Commit rejected: %d conflicting key(s)", len(conflicts))
            raise BookingConflictError(sorted(set(conflicts)))

        for b in bookings:
            self._rows[b.key] = b
        logger.info("Committed %d booking(s)", len(bookings))

    def bookings(self) -> list[Booking]:
        """All rows, ordered by date then slot id."""
        return [self._rows[k] for k in sorted(self._rows)]

    def bookings_between(self, start: date, end: date) -> list[Booking]:
        """Rows with start <= date <= end, ordered by date then slot id."""
        return [b for b in self.bookings() if start <= b.date <= end]
