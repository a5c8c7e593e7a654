"""Input validation for slot layouts and booking request fields."""

from __future__ import annotations

from datetime import date

from slot_booking.layout import KINDS


def validate_layout(data: dict) -> list[str]:
    """Validate a layout definition. Returns list of error messages (empty = valid).

    Checks:
    - categories is a list of {name, placements}
    - each placement has a list of slots, each with a non-empty slot_id
    - slot ids are unique across the whole layout
    - products maps names to non-empty family keys
    - kinds name a known slot kind
    """
    errors: list[str] = []

    categories = data.get("categories")
    if not isinstance(categories, list):
        return ["'categories' must be a list"]

    seen: dict[str, str] = {}
    for ci, cat in enumerate(categories):
        if not isinstance(cat, dict):
            errors.append(f"Category {ci}: expected object, got {cat!r}")
            continue
        placements = cat.get("placements", [])
        if not isinstance(placements, list):
            errors.append(f"Category {ci}: 'placements' must be a list")
            continue

        for pi, plc in enumerate(placements):
            where = f"Category {ci}, placement {pi}"
            if not isinstance(plc, dict):
                errors.append(f"{where}: expected object, got {plc!r}")
                continue
            family = plc.get("family")
            if family is not None and (not isinstance(family, str) or not family.strip()):
                errors.append(f"{where}: 'family' must be a non-empty string")

            slots = plc.get("slots", [])
            if not isinstance(slots, list):
                errors.append(f"{where}: 'slots' must be a list")
                continue

            for si, slot in enumerate(slots):
                slot_id = slot.get("slot_id") if isinstance(slot, dict) else None
                if not isinstance(slot_id, str) or not slot_id.strip():
                    errors.append(f"{where}, slot {si}: missing 'slot_id'")
                    continue
                if slot_id in seen:
                    errors.append(
                        f"{where}, slot {si}: duplicate slot_id {slot_id!r} "
                        f"(first seen in {seen[slot_id]})"
                    )
                    continue
                seen[slot_id] = where

    products = data.get("products", {})
    if not isinstance(products, dict):
        errors.append("'products' must be an object")
    else:
        for name, family in products.items():
            if not isinstance(family, str) or not family.strip():
                errors.append(f"Product {name!r}: family must be a non-empty string")

    kinds = data.get("kinds", {})
    if not isinstance(kinds, dict):
        errors.append("'kinds' must be an object")
    else:
        for family, kind in kinds.items():
            if kind not in KINDS:
                errors.append(
                    f"Kind for {family!r}: unknown kind {kind!r} "
                    f"(expected one of {', '.join(sorted(KINDS))})"
                )

    return errors


def validate_request_fields(
    advertiser: str | None,
    start: date | None,
    end: date | None,
    slots_or_families: list[str],
) -> list[str]:
    """Validate the fields a booking form must carry before allocation.

    Checks:
    - advertiser is present
    - start and end dates are present and start <= end
    - at least one slot or family is selected
    """
    errors: list[str] = []

    if not advertiser or not advertiser.strip():
        errors.append("advertiser is required")

    if start is None or end is None:
        errors.append("start and end dates are required")
    elif end < start:
        errors.append(
            f"end date {end.isoformat()} is before start date {start.isoformat()}"
        )

    if not [s for s in slots_or_families if s and s.strip()]:
        errors.append("at least one slot or family is required")

    return errors
