"""Allocation engine: assign booking requests to concrete slots.

Provides find_free_slot (read-only lookup), allocate (all-or-nothing batch
assignment) and the Occupancy tracker they share.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Sequence

from slot_booking.dates import to_day
from slot_booking.normalize import normalize
from slot_booking.types import (
    AllocationFailure,
    AllocationResult,
    Booking,
    BookingRequest,
    FailureReason,
)

logger = logging.getLogger(__name__)

Capacity = Mapping[str, Sequence[str]]
OccupancySnapshot = Mapping[date | str, Iterable[str]]


@dataclass
class Occupancy:
    """Mutable per-date set of taken slot ids.

    Seeded from a snapshot of the store, then updated as the batch is
    assigned. The caller's snapshot is never mutated.
    """

    taken: dict[date, set[str]] = field(default_factory=dict)

    @classmethod
    def from_snapshot(cls, existing: OccupancySnapshot | None) -> Occupancy:
        taken: dict[date, set[str]] = {}
        for day, slot_ids in (existing or {}).items():
            taken.setdefault(to_day(day), set()).update(slot_ids)
        return cls(taken)

    def is_taken(self, day: date, slot_id: str) -> bool:
        return slot_id in self.taken.get(day, ())

    def taken_in(self, day: date, slot_ids: Iterable[str]) -> set[str]:
        """The subset of ``slot_ids`` taken on ``day``."""
        day_taken = self.taken.get(day, set())
        return {s for s in slot_ids if s in day_taken}

    def take(self, day: date, slot_id: str) -> None:
        self.taken.setdefault(day, set()).add(slot_id)

    def copy(self) -> Occupancy:
        return Occupancy({d: set(s) for d, s in self.taken.items()})


def find_free_slot(
    occupancy: Occupancy,
    day: date,
    candidates: Sequence[str],
) -> str | None:
    """Read-only: first candidate not taken on ``day``. Does NOT mutate.

    Lowest index wins, so identical inputs always give identical picks.
    """
    for slot_id in candidates:
        if not occupancy.is_taken(day, slot_id):
            return slot_id
    return None


def _family_index(capacity: Capacity) -> dict[str, str]:
    """slot id -> family for every catalogued slot."""
    index: dict[str, str] = {}
    for family, slot_ids in capacity.items():
        for slot_id in slot_ids:
            index.setdefault(slot_id, family)
    return index


def _occupied_count(
    occupancy: Occupancy,
    day: date,
    family: str,
    candidates: Sequence[str],
) -> int:
    """Slots of ``family`` taken on ``day``.

    Falls back to normalized-id matching for families with no list.
    """
    if candidates:
        return len(occupancy.taken_in(day, candidates))
    return sum(1 for s in occupancy.taken.get(day, ()) if normalize(s) == family)


def allocate(
    requests: Sequence[BookingRequest],
    capacity: Capacity,
    existing: OccupancySnapshot | None = None,
) -> AllocationResult:
    """Assign every request to a concrete slot, or report every failure.

    Requests are processed once, in order; earlier requests get first pick
    within a shared family. Pinned requests keep their slot id if it is free,
    even when the id is not in the family's capacity list. Unpinned requests
    get the first free slot of their family's ordered list.

    Args:
        requests: Ordered booking requests.
        capacity: family -> ordered concrete slot ids.
        existing: date -> slot ids already committed in the store.

    Returns:
        AllocationResult with bookings in request order when every request
        was placed; otherwise with the full ordered failure list and no
        bookings.
    """
    occupancy = Occupancy.from_snapshot(existing)
    family_index = _family_index(capacity)

    resolved: list[Booking] = []
    failures: list[AllocationFailure] = []

    for i, req in enumerate(requests):
        day = req.date

        if req.is_pinned:
            slot_id = req.slot_id
            family = family_index.get(slot_id) or normalize(slot_id)
            candidates = capacity.get(family, ())

            if occupancy.is_taken(day, slot_id):
                failures.append(AllocationFailure(
                    date=day,
                    family_key=family,
                    reason=FailureReason.ALREADY_OCCUPIED,
                    capacity=len(candidates) if candidates else None,
                    occupied=_occupied_count(occupancy, day, family, candidates),
                    request_index=i,
                ))
                continue

            occupancy.take(day, slot_id)
            resolved.append(req.resolved(slot_id))
            logger.debug("%s: pinned %s", day.isoformat(), slot_id)
            continue

        family = req.family_key
        candidates = capacity.get(family, ())
        if not candidates:
            failures.append(AllocationFailure(
                date=day,
                family_key=family,
                reason=FailureReason.NO_CAPACITY_LIST,
                request_index=i,
            ))
            continue

        chosen = find_free_slot(occupancy, day, candidates)
        if chosen is None:
            failures.append(AllocationFailure(
                date=day,
                family_key=family,
                reason=FailureReason.CAPACITY_EXCEEDED,
                capacity=len(candidates),
                occupied=len(occupancy.taken_in(day, candidates)),
                request_index=i,
            ))
            continue

        occupancy.take(day, chosen)
        resolved.append(req.resolved(chosen))
        logger.debug("%s: assigned %s -> %s", day.isoformat(), family, chosen)

    if failures:
        logger.info(
            "Allocation rejected: %d of %d request(s) failed",
            len(failures), len(requests),
        )
        return AllocationResult(failures=tuple(failures))

    logger.info("Allocation accepted: %d booking(s)", len(resolved))
    return AllocationResult(bookings=tuple(resolved))


def occupancy_from_bookings(bookings: Iterable[Booking]) -> dict[date, set[str]]:
    """Occupancy snapshot (date -> slot ids) from committed bookings."""
    snapshot: dict[date, set[str]] = {}
    for b in bookings:
        snapshot.setdefault(b.date, set()).add(b.slot_id)
    return snapshot


def check_no_double_booking(bookings: Iterable[Booking]) -> list[tuple[date, str]]:
    """Return every (date, slot_id) key that appears more than once."""
    counts = Counter(b.key for b in bookings)
    return [key for key, n in counts.items() if n > 1]
