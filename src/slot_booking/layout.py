"""Slot layout: the static grid of categories, placements and concrete slots.

The layout is the single source of the family -> ordered capacity table.
Build it once from configuration and pass it (or its ``capacity()``) into
every allocation call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from slot_booking.normalize import canonical_family, normalize
from slot_booking.types import BookingRequest


@dataclass(frozen=True)
class SlotKind:
    """Display rules for a family of slots."""

    name: str
    has_exposure: bool
    has_country: bool


KINDS: dict[str, SlotKind] = {
    "banner": SlotKind("banner", has_exposure=False, has_country=True),
    "funnel": SlotKind("funnel", has_exposure=False, has_country=True),
    "interactive": SlotKind("interactive", has_exposure=True, has_country=False),
    "alert": SlotKind("alert", has_exposure=True, has_country=False),
    "other": SlotKind("other", has_exposure=False, has_country=False),
}
DEFAULT_KIND = KINDS["banner"]


@dataclass(frozen=True)
class Slot:
    """One concrete bookable row of the grid."""

    name: str
    slot_id: str
    family: str


@dataclass(frozen=True)
class Placement:
    name: str
    slots: tuple[Slot, ...]


@dataclass(frozen=True)
class Category:
    name: str
    placements: tuple[Placement, ...]


class SlotLayout:
    """Parsed slot layout. Answers family, capacity and kind queries.

    A placement may declare ``family`` explicitly; otherwise each slot's
    family is ``normalize(slot_id)``. Capacity lists follow display order.
    """

    def __init__(
        self,
        layout_id: str,
        categories: list[dict],
        products: dict[str, str] | None = None,
        kinds: dict[str, str] | None = None,
    ) -> None:
        self.layout_id = layout_id

        parsed: list[Category] = []
        for cat in categories:
            placements: list[Placement] = []
            for plc in cat.get("placements", []):
                declared = plc.get("family")
                slots = tuple(
                    Slot(
                        name=s.get("name", ""),
                        slot_id=s["slot_id"],
                        family=declared or normalize(s["slot_id"]),
                    )
                    for s in plc.get("slots", [])
                )
                placements.append(Placement(plc.get("name", ""), slots))
            parsed.append(Category(cat.get("name", ""), tuple(placements)))
        self.categories: tuple[Category, ...] = tuple(parsed)

        # family -> ordered slot ids; slot id -> family
        capacity: dict[str, list[str]] = {}
        self._family_by_slot: dict[str, str] = {}
        for slot in self.slots():
            capacity.setdefault(slot.family, []).append(slot.slot_id)
            self._family_by_slot[slot.slot_id] = slot.family
        self._capacity = {family: tuple(ids) for family, ids in capacity.items()}

        self._products = {k.strip(): v for k, v in (products or {}).items()}
        self._kinds = {k: KINDS[v] for k, v in (kinds or {}).items()}

    def slots(self) -> list[Slot]:
        """All slots in display order."""
        return [
            slot
            for cat in self.categories
            for plc in cat.placements
            for slot in plc.slots
        ]

    def capacity(self) -> dict[str, tuple[str, ...]]:
        """family -> ordered tuple of concrete slot ids. Built once; do not mutate."""
        return self._capacity

    def family_of(self, slot_id: str) -> str:
        """Family key for a concrete slot id (or a family key itself)."""
        if slot_id in self._family_by_slot:
            return self._family_by_slot[slot_id]
        return normalize(slot_id)

    def kind_of(self, slot_id: str) -> SlotKind:
        """Display kind for a slot id or family key. Defaults to banner."""
        family = self.family_of(slot_id)
        if family in self._kinds:
            return self._kinds[family]
        return self._kinds.get(canonical_family(slot_id), DEFAULT_KIND)

    def is_exposure_tracked(self, slot_id: str) -> bool:
        return self.kind_of(slot_id).has_exposure

    def family_for_product(self, product: str) -> str:
        """Family key for a proposal product name ("체크리스트" -> "checklist")."""
        name = (product or "").strip()
        if name in self._products:
            return self._products[name]
        return normalize(name)

    def slot_for_product(self, product: str) -> str:
        """First concrete slot of the product's family, or ``<family>_t1``."""
        family = self.family_for_product(product)
        ids = self._capacity.get(family)
        if ids:
            return ids[0]
        return f"{family}_t1"

    def request_for(
        self,
        day: date,
        slot_or_family: str,
        target_countries: str | None = None,
        guaranteed_exposure: int | None = None,
        advertiser_name: str | None = None,
    ) -> BookingRequest:
        """Classify a raw id the way bulk imports do.

        An id listed in its family's capacity list is a pinned request.
        Anything else is an unpinned request for the id's family.
        """
        slot_or_family = slot_or_family.strip()
        family = self.family_of(slot_or_family)
        pinned = slot_or_family in self._capacity.get(family, ())
        return BookingRequest(
            date=day,
            slot_id=slot_or_family if pinned else None,
            family_key=None if pinned else family,
            target_countries=target_countries,
            guaranteed_exposure=guaranteed_exposure,
            advertiser_name=advertiser_name,
        )

    def __repr__(self) -> str:
        return (
            f"SlotLayout({self.layout_id!r}, families={len(self._capacity)}, "
            f"slots={len(self._family_by_slot)})"
        )
