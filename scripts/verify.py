#!/usr/bin/env python
"""Visual verification report for slot-booking.

Run:  uv run python scripts/verify.py

Produces a formatted report showing:
  1. Reference data (slot layout as tables, committed bookings as a grid)
  2. Allocation scenarios  -- input/output tables
  3. Proposal sheet parsing  -- parsed and dropped rows
  4. Summary rows and cell runs for the reference week
"""

from __future__ import annotations

import json
import sys
from datetime import date, datetime
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths and data loading
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
FIXTURES = ROOT / "data" / "fixtures"
SCENARIOS = FIXTURES / "scenarios"

sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tests"))

from conftest import make_booking, make_request, proposal_table
from slot_booking.allocation import allocate
from slot_booking.booking import import_table
from slot_booking.dates import days_between
from slot_booking.debug import show_occupancy, show_runs
from slot_booking.loaders import load_bookings_json, load_layout_json
from slot_booking.parser import parse_table, rows_to_requests
from slot_booking.store import InMemoryBookingStore
from slot_booking.summary import summarize


def _load(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


LAYOUT = load_layout_json(FIXTURES / "layout.json")
BOOKINGS = load_bookings_json(FIXTURES / "bookings.json")
DAYS = list(days_between(date(2025, 1, 10), date(2025, 1, 12)))

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------
WIDTH = 90


def banner(title: str):
    print()
    print("=" * WIDTH)
    print(f"  {title}")
    print("=" * WIDTH)


def heading(title: str):
    print()
    print(f"  {title}")
    print(f"  {'-' * (len(title) + 2)}")


def table(headers: list[str], rows: list[list[str]], indent: int = 4):
    """Print a formatted table with auto-sized columns."""
    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))

    pad = " " * indent
    fmt = pad + "  ".join(f"{{:<{w}}}" for w in col_widths)
    sep = pad + "  ".join("-" * w for w in col_widths)

    print(fmt.format(*headers))
    print(sep)
    for row in rows:
        padded = row + [""] * (len(headers) - len(row))
        print(fmt.format(*padded))


def _req_str(spec: dict) -> str:
    if spec.get("slot_id"):
        return f"{spec['date'][5:]} pin {spec['slot_id']}"
    return f"{spec['date'][5:]} any {spec['family_key']}"


# ---------------------------------------------------------------------------
# Section 1: Reference Data
# ---------------------------------------------------------------------------
def section_reference():
    banner("REFERENCE DATA")
    print(f"\n    Layout:     {LAYOUT!r}")
    print(f"    Bookings:   {len(BOOKINGS)} committed rows")

    heading("Capacity Table (family -> slots in display order)")
    rows = []
    for family, ids in LAYOUT.capacity().items():
        kind = LAYOUT.kind_of(family)
        rows.append([family, kind.name, ", ".join(ids)])
    table(["Family", "Kind", "Slots"], rows)

    heading("Committed Bookings")
    rows = [
        [b.date.isoformat(), b.slot_id, b.target_countries or "",
         "" if b.guaranteed_exposure is None else f"{b.guaranteed_exposure:,}",
         b.advertiser_name or ""]
        for b in BOOKINGS
    ]
    table(["Date", "Slot", "Countries", "Exposure", "Advertiser"], rows)

    print()
    show_occupancy(LAYOUT, DAYS, BOOKINGS)


# ---------------------------------------------------------------------------
# Section 2: Allocation
# ---------------------------------------------------------------------------
def section_allocate():
    banner("ALLOCATION")

    data = _load(SCENARIOS / "allocate.json")

    heading("Function: allocate(requests, capacity, existing) -> AllocationResult")
    print("    Pinned slots must be free; unpinned requests take the first free slot.\n")
    rows = []
    for s in data["allocate"]:
        result = allocate([make_request(r) for r in s["requests"]], s["capacity"], s["existing"])
        if "expected_slots" in s:
            actual = [b.slot_id for b in result.bookings]
            match = "OK" if actual == s["expected_slots"] else "FAIL"
            outcome = ", ".join(actual)
        else:
            actual = [(f.request_index, f.reason.value) for f in result.failures]
            expected = [(f["request_index"], f["reason"]) for f in s["expected_failures"]]
            match = "OK" if actual == expected and not result.bookings else "FAIL"
            outcome = "; ".join(f.describe() for f in result.failures)
        rows.append([
            s["id"], " | ".join(_req_str(r) for r in s["requests"]),
            outcome, match,
        ])
    table(["ID", "Requests", "Outcome", ""], rows)


# ---------------------------------------------------------------------------
# Section 3: Parsing
# ---------------------------------------------------------------------------
def section_parse():
    banner("PROPOSAL PARSING")

    report = parse_table(proposal_table())

    heading("Function: parse_table(table) -> ParseReport")
    print(f"    Advertiser: {report.advertiser}")
    print(f"    Scanned {report.scanned} line(s)\n")
    rows = [
        [str(r.line_number), r.section, r.product,
         r.start.isoformat(), r.end.isoformat(), r.target or "",
         "" if r.daily_impressions is None else str(r.daily_impressions),
         "" if r.total_impressions is None else str(r.total_impressions)]
        for r in report.rows
    ]
    table(["Line", "Section", "Product", "Start", "End", "Target", "Daily", "Total"], rows)

    if report.dropped:
        print()
        table(["Line", "Dropped"], [[str(x.line_number), x.reason] for x in report.dropped])

    heading("Function: rows_to_requests(rows, layout) -> [BookingRequest]")
    rows = [
        [r.date.isoformat(), r.family_key, r.target_countries or "",
         "" if r.guaranteed_exposure is None else str(r.guaranteed_exposure)]
        for r in rows_to_requests(report.rows, LAYOUT)
    ]
    table(["Date", "Family", "Countries", "Exposure"], rows)

    heading("Function: import_table(table, layout, store) -> ImportResult")
    store = InMemoryBookingStore(BOOKINGS)
    result = import_table(proposal_table(), LAYOUT, store)
    table(["Date", "Slot"], [[b.date.isoformat(), b.slot_id] for b in result.bookings])
    print(f"\n    Store now holds {len(store)} booking(s)\n")
    show_occupancy(LAYOUT, DAYS, store.bookings())


# ---------------------------------------------------------------------------
# Section 4: Display
# ---------------------------------------------------------------------------
def section_display():
    banner("SUMMARY ROWS AND CELL RUNS")

    data = _load(SCENARIOS / "summary.json")

    heading("Function: summarize(bookings, days, mode, families) -> DailySummary")
    rows = []
    for s in data["summarize"]:
        summary = summarize(
            [make_booking(b) for b in s["bookings"]],
            [date.fromisoformat(x) for x in s["days"]],
            s["mode"], s["families"],
        )
        actual = [[x.start.isoformat(), x.span, x.value] for x in summary.spans]
        expected = [[x["start"], x["span"], x["value"]] for x in s["expected_spans"]]
        spans = " | ".join(f"{v}x{n}" if n > 1 else v for _, n, v in actual)
        rows.append([s["id"], s["mode"], spans, "OK" if actual == expected else "FAIL"])
    table(["ID", "Mode", "Spans", ""], rows)

    heading("Reference week, per placement")
    print()
    show_runs(LAYOUT, DAYS, BOOKINGS)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main():
    banner("SLOT-BOOKING   --  VISUAL VERIFICATION REPORT")
    print(f"    Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    print(f"    Fixture data: {FIXTURES.relative_to(ROOT)}/")

    section_reference()
    section_allocate()
    section_parse()
    section_display()

    banner("END OF REPORT")
    print()


if __name__ == "__main__":
    main()
