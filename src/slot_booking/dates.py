"""Boundary: date parsing and day-key conversion.

All engine arithmetic uses ``datetime.date``. Strings and datetimes are
converted here, once, at the edge.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator

# Tried in order; the first that parses wins.
DATE_FORMATS = (
    "%Y. %m. %d",   # 2025. 7. 1
    "%Y.%m.%d",     # 2025.7.1
    "%Y-%m-%d",     # 2025-07-01
    "%Y/%m/%d",     # 2025/07/01
    "%Y. %m. %d.",  # 2025. 7. 1.
    "%Y.%m.%d.",    # 2025.7.1.
)


def parse_day(text: str | None) -> date | None:
    """Parse a spreadsheet date cell. Returns None when no format matches.

    >>> parse_day("2025. 7. 1")
    datetime.date(2025, 7, 1)
    >>> parse_day("07/2025/01") is None
    True
    """
    if text is None:
        return None
    value = str(text).strip()
    if not value:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def to_day(value: date | datetime | str) -> date:
    """Coerce a date, datetime (time dropped) or ISO string to a date.

    Raises TypeError for other types, ValueError for malformed strings.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise TypeError(
        f"expected date, datetime or ISO string, got {type(value).__name__}"
    )


def day_key(value: date | datetime | str) -> str:
    """'YYYY-MM-DD' key for a day."""
    return to_day(value).isoformat()


def days_between(start: date, end: date) -> Iterator[date]:
    """Yield every day in [start, end], inclusive. Empty if end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_of(day: date) -> list[date]:
    """The Monday-start week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return [monday + timedelta(days=i) for i in range(7)]
