"""Reference booking flow: read occupancy, allocate, commit.

This module shows how the pieces compose. The store is whatever the caller
passes in; the in-memory store is enough for tests and previews.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Sequence

from slot_booking.allocation import allocate
from slot_booking.dates import days_between, to_day
from slot_booking.layout import SlotLayout
from slot_booking.parser import DEFAULT_MAX_ROWS, ParseReport, parse_table, rows_to_requests
from slot_booking.schema import validate_request_fields
from slot_booking.store import BookingStore
from slot_booking.types import Booking, BookingRequest, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """A committed import and the parse report it came from."""

    report: ParseReport
    bookings: list[Booking] = field(default_factory=list)


def book(
    requests: Sequence[BookingRequest],
    layout: SlotLayout,
    store: BookingStore,
) -> list[Booking]:
    """Allocate ``requests`` against the store's current occupancy and commit.

    Returns the committed bookings in request order.

    Raises:
        AllocationError: if any request could not be placed. Nothing is
            written.
        BookingConflictError: if the store found a row written after the
            occupancy read. Nothing is written; the caller may retry.
    """
    if not requests:
        return []

    capacity = layout.capacity()
    dates = sorted({r.date for r in requests})
    slot_ids: set[str] = set()
    for r in requests:
        if r.is_pinned:
            # whole family, for occupied counts on conflicts
            slot_ids.add(r.slot_id)
            slot_ids.update(capacity.get(layout.family_of(r.slot_id), ()))
        else:
            slot_ids.update(capacity.get(r.family_key, ()))

    existing = store.query_occupancy(dates, slot_ids)
    bookings = allocate(requests, capacity, existing).unwrap()
    store.commit_bookings(bookings)
    return bookings


def book_range(
    layout: SlotLayout,
    store: BookingStore,
    advertiser: str | None,
    start: date | None,
    end: date | None,
    slots_or_families: Sequence[str],
    target_countries: str | None = None,
    guaranteed_exposure: int | None = None,
) -> list[Booking]:
    """Book every day of [start, end] for each slot or family selected.

    Concrete slot ids listed in the layout are pinned; anything else is
    assigned within its family.

    Raises ValidationError before allocation when a required field is
    missing, then as book().
    """
    start = to_day(start) if start is not None else None
    end = to_day(end) if end is not None else None
    errors = validate_request_fields(advertiser, start, end, list(slots_or_families))
    if errors:
        raise ValidationError(errors)

    requests = [
        layout.request_for(
            day,
            slot_or_family,
            target_countries=target_countries,
            guaranteed_exposure=guaranteed_exposure,
            advertiser_name=advertiser,
        )
        for slot_or_family in slots_or_families
        if slot_or_family and slot_or_family.strip()
        for day in days_between(start, end)
    ]
    return book(requests, layout, store)


def import_table(
    table: Sequence[Sequence[Any]],
    layout: SlotLayout,
    store: BookingStore,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> ImportResult:
    """Parse a proposal grid and book every row as one batch.

    Raises ValidationError when nothing bookable was found or the sheet has
    no advertiser, then as book().
    """
    report = parse_table(table, max_rows)

    errors: list[str] = []
    if not report.rows:
        errors.append("no bookable rows found")
    for row in report.rows:
        for e in validate_request_fields(
            report.advertiser, row.start, row.end, [layout.family_for_product(row.product)]
        ):
            errors.append(f"line {row.line_number}: {e}")
    if errors:
        raise ValidationError(errors)

    bookings = book(rows_to_requests(report.rows, layout), layout, store)
    logger.info(
        "Imported %d row(s) as %d booking(s) for %s",
        len(report.rows), len(bookings), report.advertiser,
    )
    return ImportResult(report=report, bookings=bookings)
