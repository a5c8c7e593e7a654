"""Shared test fixtures and data loading for slot-booking.

All test data lives in data/fixtures/ as JSON files.  This module loads
that data and exposes helper functions + pytest fixtures for the tests.

Reference dates: Fri 2025-01-10 through Sun 2025-01-12.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
FIXTURES_DIR = Path(__file__).resolve().parent.parent / "data" / "fixtures"
SCENARIOS_DIR = FIXTURES_DIR / "scenarios"
LAYOUT_PATH = FIXTURES_DIR / "layout.json"
BOOKINGS_PATH = FIXTURES_DIR / "bookings.json"


# ---------------------------------------------------------------------------
# Data loaders
# ---------------------------------------------------------------------------
def _load_json(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_scenarios(name: str):
    """Load a scenario file from data/fixtures/scenarios/{name}.json."""
    return _load_json(SCENARIOS_DIR / f"{name}.json")


def layout_data() -> dict:
    """Fresh copy of the reference layout definition."""
    return _load_json(LAYOUT_PATH)


# ---------------------------------------------------------------------------
# Convenience helpers (importable by test modules)
# ---------------------------------------------------------------------------
def d(iso: str) -> date:
    """date from 'YYYY-MM-DD'.

    >>> d("2025-01-10")
    datetime.date(2025, 1, 10)
    """
    return date.fromisoformat(iso)


def make_layout():
    """SlotLayout built from data/fixtures/layout.json."""
    from slot_booking.loaders import load_layout_json

    return load_layout_json(LAYOUT_PATH)


def make_request(spec: dict):
    """BookingRequest from a scenario dict."""
    from slot_booking.types import BookingRequest

    return BookingRequest(
        date=d(spec["date"]),
        slot_id=spec.get("slot_id"),
        family_key=spec.get("family_key"),
        target_countries=spec.get("country_names"),
        guaranteed_exposure=spec.get("guaranteed_exposure"),
        advertiser_name=spec.get("advertiser_name"),
    )


def make_booking(spec: dict):
    """Booking from a scenario dict in the persisted record shape."""
    from slot_booking.types import Booking

    return Booking(
        date=d(spec["date"]),
        slot_id=spec["slot_id"],
        target_countries=spec.get("country_names"),
        guaranteed_exposure=spec.get("guaranteed_exposure"),
        advertiser_name=spec.get("advertiser_name"),
    )


def proposal_table() -> list[list[str]]:
    """A small proposal sheet as the spreadsheet export gives it."""
    return [
        ["마이리얼트립 광고 제안_1안"],
        [],
        ["디스플레이 광고 상품명"],
        ["No", "상품명", "지면", "타겟", "예상 수치 (일)", "단가", "예상 수치 (총 기간)", "시작일", "종료일"],
        ["1", "체크리스트", "앱", "KR, US", "", "", "", "2025. 1. 10", "2025. 1. 11"],
        ["2", "인터랙티브 배너", "앱", "", "50,000", "", "", "2025-01-10", "2025-01-10"],
        ["3", "검색 퍼널", "앱", "JP", "", "", "", "2025/13/40", "2025-01-12"],
        ["", "총합", "", "", "", "", "", "", ""],
        ["알람 광고 상품 명"],
        ["1", "친구톡", "카카오", "", "", "", "90,000", "2025.1.10.", "2025.1.12."],
    ]


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def layout():
    return make_layout()


@pytest.fixture
def capacity(layout):
    return layout.capacity()


@pytest.fixture
def reference_bookings():
    from slot_booking.loaders import load_bookings_json

    return load_bookings_json(BOOKINGS_PATH)


@pytest.fixture
def store(reference_bookings):
    """In-memory store seeded with data/fixtures/bookings.json."""
    from slot_booking.store import InMemoryBookingStore

    return InMemoryBookingStore(reference_bookings)


@pytest.fixture
def empty_store():
    from slot_booking.store import InMemoryBookingStore

    return InMemoryBookingStore()
