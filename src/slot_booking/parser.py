"""Request row parser: proposal sheets and pasted text -> booking rows.

A proposal sheet is a 2D grid of text. Section headers switch the current
section; numbered rows inside a section are data rows. The start and end
date cells are always the last two cells of a row.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Sequence

from slot_booking.dates import days_between, parse_day
from slot_booking.layout import SlotLayout
from slot_booking.types import BookingRequest

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 300

_SECTIONS = (
    (re.compile(r"디스플레이\s*광고\s*상품명"), "display"),
    (re.compile(r"알람\s*광고\s*상품\s*명"), "alert"),
    (re.compile(r"기타\s*상품\s*명"), "other"),
)
_PROPOSAL = re.compile(r"광고\s*제안")
_ADVERTISER = re.compile(r"([^\s]+)\s*광고\s*제안")
_ROW_NUMBER = re.compile(r"^\d+")
_TOTAL_MARKER = "총합"
_NON_NUMERIC = re.compile(r"[^0-9\-]")

# Fixed column offsets within a data row
_COL_PRODUCT = 1
_COL_TARGET = 3
_COL_DAILY = 4
_COL_TOTAL = 6


@dataclass(frozen=True)
class ParsedRow:
    """One proposal line, ready for preview or expansion into requests."""

    section: str
    product: str
    start: date
    end: date
    target: str | None = None
    daily_impressions: int | None = None
    total_impressions: int | None = None
    advertiser: str | None = None
    line_number: int | None = None

    @property
    def days(self) -> int:
        """Inclusive length of the booked range."""
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class DroppedRow:
    line_number: int
    reason: str


@dataclass
class ParseReport:
    """Result of parsing one table."""

    rows: list[ParsedRow] = field(default_factory=list)
    dropped: list[DroppedRow] = field(default_factory=list)
    scanned: int = 0
    advertiser: str | None = None


def to_int(value: Any) -> int | None:
    """Strip everything but digits and '-', then parse. Empty -> None."""
    if value is None:
        return None
    digits = _NON_NUMERIC.sub("", str(value))
    if not digits:
        return None
    try:
        return int(digits)
    except ValueError:
        return None


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _clean_line(raw: Sequence[Any]) -> list[str]:
    """Stringify cells and drop trailing blanks."""
    line = [_cell(c) for c in raw]
    while line and not line[-1]:
        line.pop()
    return line


def _at(line: list[str], idx: int) -> str:
    return line[idx] if len(line) > idx else ""


def _find_advertiser(lines: list[list[str]]) -> str | None:
    for line in lines:
        text = " ".join(line)
        if _PROPOSAL.search(text):
            match = _ADVERTISER.search(text)
            if match:
                return match.group(1)
    return None


def parse_table(
    table: Sequence[Sequence[Any]],
    max_rows: int = DEFAULT_MAX_ROWS,
) -> ParseReport:
    """Parse a proposal grid into rows.

    Only the first ``max_rows`` raw rows are examined. Rows with an
    unparseable start or end date, a reversed range or negative
    impressions are dropped and listed in the report.
    Pure function of its input.
    """
    lines = [_clean_line(raw or ()) for raw in list(table)[:max_rows]]
    report = ParseReport(scanned=len(lines), advertiser=_find_advertiser(lines))
    if report.advertiser:
        logger.debug("Advertiser: %s", report.advertiser)

    section: str | None = None
    for number, line in enumerate(lines):
        if not line:
            continue

        text = " ".join(line)
        header = next((name for pattern, name in _SECTIONS if pattern.search(text)), None)
        if header:
            section = header
            logger.debug("Line %d: section %s", number, section)
            continue

        if section is None or not _ROW_NUMBER.match(line[0]):
            continue
        product = _at(line, _COL_PRODUCT)
        if _TOTAL_MARKER in product:
            continue

        start = parse_day(line[-2]) if len(line) >= 2 else None
        end = parse_day(line[-1])
        if start is None or end is None:
            which = "start" if start is None else "end"
            report.dropped.append(DroppedRow(number, f"invalid {which} date"))
            logger.warning("Line %d: invalid %s date, row dropped", number, which)
            continue
        if end < start:
            report.dropped.append(DroppedRow(number, "end date before start date"))
            logger.warning("Line %d: end date before start date, row dropped", number)
            continue

        daily = to_int(_at(line, _COL_DAILY))
        total = to_int(_at(line, _COL_TOTAL))
        if (daily is not None and daily < 0) or (total is not None and total < 0):
            report.dropped.append(DroppedRow(number, "negative impressions"))
            logger.warning("Line %d: negative impressions, row dropped", number)
            continue

        report.rows.append(ParsedRow(
            section=section,
            product=product,
            start=start,
            end=end,
            target=_at(line, _COL_TARGET) or None,
            daily_impressions=daily,
            total_impressions=total,
            advertiser=report.advertiser,
            line_number=number,
        ))

    logger.info(
        "Parsed %d row(s), dropped %d (%d line(s) scanned)",
        len(report.rows), len(report.dropped), report.scanned,
    )
    return report


def parse(
    table: Sequence[Sequence[Any]],
    max_rows: int = DEFAULT_MAX_ROWS,
) -> list[ParsedRow]:
    """parse_table() returning only the parsed rows."""
    return parse_table(table, max_rows).rows


def split_text(text: str) -> list[list[str]]:
    """Split pasted text into cells.

    Tab-separated if the line has a tab, else runs of 2+ spaces, else single
    spaces. Blank lines are skipped.
    """
    table: list[list[str]] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if "\t" in line:
            cells = line.split("\t")
        elif "  " in line:
            cells = re.split(r"\s{2,}", line)
        else:
            cells = line.split(" ")
        table.append(cells)
    return table


def parse_text(text: str, max_rows: int = DEFAULT_MAX_ROWS) -> ParseReport:
    """Parse pasted text (tabs, aligned columns or single spaces)."""
    return parse_table(split_text(text), max_rows)


def parse_workbook(path: str | Path, max_rows: int = DEFAULT_MAX_ROWS) -> ParseReport:
    """Parse the first worksheet of an .xlsx proposal."""
    from openpyxl import load_workbook

    wb = load_workbook(Path(path), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        table = [list(row) for row in ws.iter_rows(max_row=max_rows, values_only=True)]
    finally:
        wb.close()

    logger.debug("Read %d row(s) from %s", len(table), path)
    return parse_table(table, max_rows)


def rows_to_requests(
    rows: Sequence[ParsedRow],
    layout: SlotLayout,
) -> list[BookingRequest]:
    """Expand parsed rows into one unpinned request per family per day.

    Exposure-tracked families carry the daily impressions (or the total
    spread evenly over the range, or 0). Country-tracked families carry the
    row's target string.
    """
    requests: list[BookingRequest] = []
    for row in rows:
        family = layout.family_for_product(row.product)
        kind = layout.kind_of(family)

        daily = row.daily_impressions
        if daily is None and row.total_impressions is not None:
            daily = row.total_impressions // max(1, row.days)

        for day in days_between(row.start, row.end):
            requests.append(BookingRequest(
                date=day,
                family_key=family,
                target_countries=row.target if kind.has_country else None,
                guaranteed_exposure=(daily or 0) if kind.has_exposure else None,
                advertiser_name=row.advertiser,
            ))
    return requests
