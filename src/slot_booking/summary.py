"""Daily summary rows: per-day country lists or exposure totals, run-length encoded."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable, Sequence

from slot_booking.dates import to_day
from slot_booking.layout import SlotLayout
from slot_booking.normalize import canonical_family, normalize as default_normalize
from slot_booking.types import Booking

PLACEHOLDER = "—"
COUNTRIES = "countries"
IMPRESSIONS = "impressions"
MODES = (COUNTRIES, IMPRESSIONS)


@dataclass(frozen=True)
class Span:
    """A run of consecutive days sharing one rendered value."""

    start: date
    span: int
    value: str


@dataclass
class DailySummary:
    by_date: dict[date, str | int] = field(default_factory=dict)
    spans: list[Span] = field(default_factory=list)


def pack_tokens(tokens: Sequence[str], max_tokens: int) -> str:
    """Join tokens; past ``max_tokens`` show the rest as a count.

    >>> pack_tokens(["KR", "US", "JP"], 2)
    'KR, US 외 1개'
    """
    if len(tokens) <= max_tokens:
        return ", ".join(tokens)
    return f"{', '.join(tokens[:max_tokens])} 외 {len(tokens) - max_tokens}개"


def _render_countries(rows: list[Booking], max_tokens: int) -> str:
    seen: set[str] = set()
    ordered: list[str] = []
    for b in rows:
        for token in b.countries:
            if token not in seen:
                seen.add(token)
                ordered.append(token)
    return pack_tokens(ordered, max_tokens) if ordered else PLACEHOLDER


def run_length(days: Sequence[date], by_date: dict[date, str | int]) -> list[Span]:
    """Merge consecutive days (in ``days`` order) with identical values."""
    spans: list[Span] = []
    i = 0
    while i < len(days):
        value = by_date[days[i]]
        j = i + 1
        while j < len(days) and by_date[days[j]] == value:
            j += 1
        spans.append(Span(start=days[i], span=j - i, value=str(value)))
        i = j
    return spans


def summarize(
    bookings: Iterable[Booking],
    days: Sequence[date | datetime],
    mode: str,
    family_keys: Iterable[str],
    max_tokens: int = 6,
    normalize: Callable[[str], str] = default_normalize,
) -> DailySummary:
    """Build the summary row for one section of the grid.

    Only bookings on one of ``days`` whose normalized slot id is in
    ``family_keys`` count. ``impressions`` sums guaranteed exposure (absent
    counts as 0); ``countries`` lists distinct country tokens in first-seen
    order, or a placeholder for a day with none.
    """
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")

    day_list = [to_day(d) for d in days]
    wanted_days = set(day_list)
    families = {normalize(k) for k in family_keys}

    bucket: dict[date, list[Booking]] = {}
    for b in bookings:
        day = to_day(b.date)
        if day not in wanted_days or normalize(b.slot_id) not in families:
            continue
        bucket.setdefault(day, []).append(b)

    by_date: dict[date, str | int] = {}
    for day in day_list:
        rows = bucket.get(day, [])
        if mode == IMPRESSIONS:
            by_date[day] = sum(b.guaranteed_exposure or 0 for b in rows)
        else:
            by_date[day] = _render_countries(rows, max_tokens)

    return DailySummary(by_date=by_date, spans=run_length(day_list, by_date))


def summary_mode_for(family_keys: Iterable[str], layout: SlotLayout) -> str:
    """Impressions if any family in the section tracks exposure, else countries."""
    for key in family_keys:
        if layout.is_exposure_tracked(key) or canonical_family(key) == "interactive":
            return IMPRESSIONS
    return COUNTRIES
