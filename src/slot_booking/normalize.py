"""Identifier normalization: concrete slot id -> family base key."""

from __future__ import annotations

import re

# Trailing suffix: _t<n>, [-_.]v<n>, -<n>
_SUFFIX = re.compile(r"(_t\d+|[-_.]?v\d+|-\d+)$")
_WHITESPACE = re.compile(r"\s+")

# Alternate spellings seen in layout sheets, applied after suffix stripping.
_ALIASES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^mainhomefront$"), "main_home_front"),
    (re.compile(r"^mainhome$"), "main_home"),
    (re.compile(r"^interactive.*$"), "interactive"),
    (re.compile(r"^funnelsearch.*$"), "funnel_search"),
    (re.compile(r"^funneldomestic.*$"), "funnel_domestic"),
    (re.compile(r"^funne(l)?over(sea|seas).*$"), "funnel_oversea"),
    (re.compile(r"^funneltraveler.*$"), "funnel_traveler"),
]


def normalize(slot_id: str | None) -> str:
    """Map a concrete slot id to its family key.

    Lower-cases, removes whitespace, then strips trailing version or
    target suffixes. Idempotent.

    >>> normalize("Checklist_T2")
    'checklist'
    >>> normalize("banner-v3")
    'banner'
    """
    value = _WHITESPACE.sub("", str(slot_id or "").lower())
    base = _SUFFIX.sub("", value)
    # stacked suffixes: "x_t1_t2" -> "x"
    while _SUFFIX.search(base):
        base = _SUFFIX.sub("", base)
    return base


def canonical_family(slot_id: str | None) -> str:
    """normalize() plus the fixed alias table. Used for section detection."""
    base = normalize(slot_id)
    for pattern, name in _ALIASES:
        if pattern.match(base):
            return name
    return base


def same_family(a: str, b: str) -> bool:
    return normalize(a) == normalize(b)
