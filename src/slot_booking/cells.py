"""Grid cell runs: one row's week of bookings merged into labelled spans."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Sequence

from slot_booking.dates import to_day
from slot_booking.layout import SlotLayout
from slot_booking.normalize import canonical_family, normalize
from slot_booking.types import Booking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellRun:
    """A horizontal run of grid cells. Empty days have an empty slot_id."""

    day_start_index: int
    span: int
    label_top: str
    label_bottom: str = ""
    slot_id: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.slot_id


def _exposure_tracked(slot_id: str, layout: SlotLayout | None) -> bool:
    if layout is not None:
        return layout.is_exposure_tracked(slot_id)
    return canonical_family(slot_id) == "interactive"


def build_label(booking: Booking, layout: SlotLayout | None = None) -> tuple[str, str]:
    """(top, bottom) labels for a booked cell."""
    if _exposure_tracked(booking.slot_id, layout):
        exposure = booking.guaranteed_exposure
        return ("Booking", f"{exposure:,}" if exposure else "0")
    return (booking.target_countries or "", "")


def build_runs(
    row_slot_id: str,
    week_days: Sequence[date | datetime],
    bookings: Iterable[Booking],
    layout: SlotLayout | None = None,
) -> list[CellRun]:
    """Merge one row's bookings over ``week_days`` into cell runs.

    A booking belongs to the row when both ids normalize to the same family.
    When a day has several bookings only the first is shown. Empty days are
    single-cell runs; booked days merge while their labels match.
    """
    row_family = normalize(row_slot_id)
    at: dict[date, list[Booking]] = {}
    for b in bookings:
        if normalize(b.slot_id) == row_family:
            at.setdefault(to_day(b.date), []).append(b)

    for day, items in at.items():
        if len(items) > 1:
            logger.warning(
                "%s: %d bookings for row %s, showing %s",
                day.isoformat(), len(items), row_slot_id, items[0].slot_id,
            )

    days = [to_day(d) for d in week_days]
    labels: list[tuple[str, str] | None] = []
    for day in days:
        items = at.get(day)
        labels.append(build_label(items[0], layout) if items else None)

    runs: list[CellRun] = []
    i = 0
    while i < len(days):
        label = labels[i]
        if label is None:
            runs.append(CellRun(day_start_index=i, span=1, label_top=""))
            i += 1
            continue

        span = 1
        while i + span < len(days) and labels[i + span] == label:
            span += 1

        top, bottom = label
        runs.append(CellRun(
            day_start_index=i,
            span=span,
            label_top=top,
            label_bottom=bottom,
            slot_id=at[days[i]][0].slot_id,
        ))
        i += span
    return runs
