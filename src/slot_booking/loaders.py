"""Data loading utilities for slot layouts and booking exports."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from slot_booking.dates import to_day
from slot_booking.layout import SlotLayout
from slot_booking.schema import validate_layout
from slot_booking.types import Booking, LayoutError

logger = logging.getLogger(__name__)


def layout_from_dict(data: dict, source: str = "<layout>") -> SlotLayout:
    """Build a SlotLayout from an already-decoded layout definition.

    Raises LayoutError if validation fails.
    """
    errors = validate_layout(data)
    if errors:
        raise LayoutError(source, errors)

    return SlotLayout(
        data.get("id", source),
        data["categories"],
        products=data.get("products", {}),
        kinds=data.get("kinds", {}),
    )


def load_layout_json(path: str | Path) -> SlotLayout:
    """Load a SlotLayout from a JSON file.

    The JSON file has the format:
    {
        "id": "...",
        "categories": [
            {"name": "...", "placements": [
                {"name": "...", "family": "checklist",
                 "slots": [{"name": "타겟 1", "slot_id": "checklist_t1"}]}
            ]}
        ],
        "products": {"체크리스트": "checklist"},
        "kinds": {"checklist": "funnel"}
    }

    Raises LayoutError if validation fails.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    data.setdefault("id", path.stem)
    layout = layout_from_dict(data, source=path.name)
    logger.info("Loaded layout %s from %s", layout, path)
    return layout


def load_bookings_json(path: str | Path) -> list[Booking]:
    """Load persisted booking rows from a JSON export.

    Each row has the persisted record shape:
    {"date": "2025-01-10", "slot_id": "checklist_t1",
     "country_names": "KR, US", "guaranteed_exposure": null,
     "advertiser_name": "..."}
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        rows = json.load(f)

    return [
        Booking(
            date=to_day(row["date"]),
            slot_id=row["slot_id"],
            target_countries=row.get("country_names"),
            guaranteed_exposure=row.get("guaranteed_exposure"),
            advertiser_name=row.get("advertiser_name"),
        )
        for row in rows
    ]
