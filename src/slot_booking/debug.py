"""ASCII visualisation for development-time verification.

This module is dev-only and not imported by production code.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from slot_booking.cells import build_runs
from slot_booking.layout import SlotLayout
from slot_booking.summary import summarize, summary_mode_for
from slot_booking.types import Booking

_DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_CELL = 4  # chars per day


def show_occupancy(
    layout: SlotLayout,
    days: Sequence[date],
    bookings: Iterable[Booking],
) -> str:
    """Print ASCII occupancy grid: one row per concrete slot.

    Legend: '.' = free, 'A'-'Z' = booked (by advertiser).
    Returns the string and also prints to stdout.
    """
    bookings = list(bookings)
    taken = {b.key: b for b in bookings}

    # advertiser -> letter
    labels: dict[str, str] = {}
    label_chars = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    for b in bookings:
        name = b.advertiser_name or "?"
        if name not in labels:
            labels[name] = label_chars[len(labels) % len(label_chars)]

    width = max((len(s.slot_id) for s in layout.slots()), default=8)
    header = "".join(f"{_DAY_NAMES[d.weekday()]:<{_CELL}}" for d in days)
    lines = [f"{'':>{width}s}  {header}"]

    for slot in layout.slots():
        row = []
        for d in days:
            b = taken.get((d, slot.slot_id))
            mark = labels[b.advertiser_name or "?"] if b else "."
            row.append(f"{mark:<{_CELL}}")
        lines.append(f"{slot.slot_id:>{width}s}  {''.join(row)}")

    if labels:
        legend = ", ".join(f"{v}={k}" for k, v in labels.items())
        lines.append(f"\nLegend: . = free, {legend}")

    result = "\n".join(lines)
    print(result)
    return result


def show_runs(
    layout: SlotLayout,
    days: Sequence[date],
    bookings: Iterable[Booking],
) -> str:
    """Print each placement's summary row and cell runs as text.

    Returns the string and also prints to stdout.
    """
    bookings = list(bookings)
    lines: list[str] = []

    for cat in layout.categories:
        for plc in cat.placements:
            if not plc.slots:
                continue
            lines.append(f"=== {cat.name} / {plc.name} ===")

            families = sorted({s.family for s in plc.slots})
            mode = summary_mode_for(families, layout)
            summary = summarize(bookings, days, mode, families)
            cells = [f"{s.value}x{s.span}" if s.span > 1 else s.value for s in summary.spans]
            lines.append(f"  summary ({mode}): {' | '.join(cells)}")

            for slot in plc.slots:
                runs = build_runs(slot.slot_id, days, bookings, layout)
                parts = []
                for run in runs:
                    text = run.label_top or "."
                    if run.label_bottom:
                        text += f"/{run.label_bottom}"
                    parts.append(f"{text}x{run.span}" if run.span > 1 else text)
                lines.append(f"  {slot.slot_id}: {' | '.join(parts)}")

    result = "\n".join(lines)
    print(result)
    return result
