"""Tests for SlotLayout, layout validation and the JSON loaders.

Test data loaded from: data/fixtures/layout.json, data/fixtures/bookings.json
"""

from __future__ import annotations

import json

import pytest

from conftest import BOOKINGS_PATH, d, layout_data


class TestSlotLayout:
    """SlotLayout — capacity table, families and kinds."""

    def test_capacity_follows_display_order(self, layout):
        cap = layout.capacity()
        assert cap["checklist"] == ("checklist_t1", "checklist_t2", "checklist_t3")
        assert cap["interactive"] == ("interactive_t1", "interactive_t2", "interactive_b1")
        assert cap["shortcut"] == ("shortcut",)

    def test_capacity_built_once(self, layout):
        """The same table is handed to every caller."""
        assert layout.capacity() is layout.capacity()

    def test_declared_family_overrides_normalize(self, layout):
        """Placement-level family groups ids normalize() would keep apart."""
        assert layout.family_of("interactive_b1") == "interactive"
        assert layout.family_of("main_home_popup_p2") == "main_home_popup"

    def test_family_of_unknown_id(self, layout):
        assert layout.family_of("checklist_t9") == "checklist"
        assert layout.family_of("checklist") == "checklist"

    @pytest.mark.parametrize(
        "slot_id, kind, exposure",
        [
            ("interactive_t1", "interactive", True),
            ("interactive_b1", "interactive", True),
            ("checklist_t2", "funnel", False),
            ("friend_talk_c1", "alert", True),
            ("shortcut", "other", False),
            ("unknown_t1", "banner", False),
        ],
    )
    def test_kinds(self, layout, slot_id, kind, exposure):
        assert layout.kind_of(slot_id).name == kind
        assert layout.is_exposure_tracked(slot_id) is exposure

    def test_kind_via_alias(self, layout):
        """Alternate spellings fall back to the canonical family's kind."""
        assert layout.kind_of("interactive_x9").name == "interactive"

    def test_products(self, layout):
        assert layout.family_for_product("체크리스트") == "checklist"
        assert layout.family_for_product(" 인터랙티브 배너 ") == "interactive"
        assert layout.family_for_product("Promo_T1") == "promo"

    def test_slot_for_product(self, layout):
        assert layout.slot_for_product("검색 퍼널") == "funnel_search_t1"
        assert layout.slot_for_product("프모페") == "프모페_t1"

    def test_request_for_classifies(self, layout):
        """Catalogued ids are pinned; family keys and unknown ids are not."""
        pinned = layout.request_for(d("2025-01-10"), "checklist_t2")
        assert pinned.slot_id == "checklist_t2"
        assert pinned.family_key is None

        family = layout.request_for(d("2025-01-10"), "checklist")
        assert family.family_key == "checklist"
        assert not family.is_pinned

        unknown = layout.request_for(d("2025-01-10"), "checklist_t9", target_countries="KR")
        assert unknown.family_key == "checklist"
        assert unknown.target_countries == "KR"

    def test_slots_in_display_order(self, layout):
        ids = [s.slot_id for s in layout.slots()]
        assert ids[:3] == ["main_home_popup_p1", "main_home_popup_p2", "checklist_t1"]
        assert ids[-1] == "friend_talk_c2"

    def test_repr(self, layout):
        assert "reference" in repr(layout)


class TestValidateLayout:
    """validate_layout() — returns error list."""

    def test_reference_layout_valid(self):
        from slot_booking.schema import validate_layout

        assert validate_layout(layout_data()) == []

    def test_categories_required(self):
        from slot_booking.schema import validate_layout

        assert validate_layout({}) == ["'categories' must be a list"]

    def test_duplicate_slot_id(self):
        from slot_booking.schema import validate_layout

        data = layout_data()
        data["categories"][0]["placements"][1]["slots"].append(
            {"name": "dup", "slot_id": "main_home_popup_p1"}
        )
        errors = validate_layout(data)
        assert len(errors) == 1
        assert "duplicate slot_id 'main_home_popup_p1'" in errors[0]

    def test_missing_slot_id(self):
        from slot_booking.schema import validate_layout

        data = {"categories": [{"placements": [{"slots": [{"name": "x"}]}]}]}
        assert validate_layout(data) == ["Category 0, placement 0, slot 0: missing 'slot_id'"]

    def test_bad_kind_and_product(self):
        from slot_booking.schema import validate_layout

        data = layout_data()
        data["kinds"]["checklist"] = "carousel"
        data["products"]["빈 상품"] = ""
        errors = validate_layout(data)
        assert any("unknown kind 'carousel'" in e for e in errors)
        assert any("빈 상품" in e for e in errors)

    def test_blank_family(self):
        from slot_booking.schema import validate_layout

        data = {"categories": [{"placements": [{"family": " ", "slots": []}]}]}
        assert validate_layout(data) == [
            "Category 0, placement 0: 'family' must be a non-empty string"
        ]


class TestValidateRequestFields:
    """validate_request_fields() — form boundary checks."""

    def test_valid(self):
        from slot_booking.schema import validate_request_fields

        assert validate_request_fields("광고주", d("2025-01-10"), d("2025-01-12"), ["checklist"]) == []

    def test_everything_missing(self):
        from slot_booking.schema import validate_request_fields

        errors = validate_request_fields("", None, None, [])
        assert errors == [
            "advertiser is required",
            "start and end dates are required",
            "at least one slot or family is required",
        ]

    def test_reversed_range(self):
        from slot_booking.schema import validate_request_fields

        errors = validate_request_fields("광고주", d("2025-01-12"), d("2025-01-10"), ["  ", "checklist"])
        assert errors == ["end date 2025-01-10 is before start date 2025-01-12"]


class TestLoaders:
    """load_layout_json() / load_bookings_json()."""

    def test_load_layout(self, layout):
        assert layout.layout_id == "reference"
        assert len(layout.slots()) == 18

    def test_id_defaults_to_file_stem(self, tmp_path):
        from slot_booking.loaders import load_layout_json

        data = layout_data()
        del data["id"]
        path = tmp_path / "weekly_grid.json"
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        assert load_layout_json(path).layout_id == "weekly_grid"

    def test_invalid_layout_raises(self, tmp_path):
        from slot_booking.loaders import load_layout_json
        from slot_booking.types import LayoutError

        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"categories": "nope"}), encoding="utf-8")
        with pytest.raises(LayoutError, match="broken.json") as exc_info:
            load_layout_json(path)
        assert exc_info.value.errors == ["'categories' must be a list"]

    def test_load_bookings(self):
        from slot_booking.loaders import load_bookings_json

        rows = load_bookings_json(BOOKINGS_PATH)
        assert len(rows) == 6
        first = rows[0]
        assert first.date == d("2025-01-10")
        assert first.slot_id == "checklist_t1"
        assert first.target_countries == "KR, US"
        assert first.guaranteed_exposure is None
        assert rows[3].guaranteed_exposure == 120000
