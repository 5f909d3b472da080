"""Tests for QuantityStore."""

import pytest

from matrix_order.errors import InputParseError
from matrix_order.quantities import QuantityStore, parse_quantity


class TestParseQuantity:
    @pytest.mark.parametrize("raw, expected", [("3", 3), (" 12 ", 12), ("0", 0), (7, 7)])
    def test_valid(self, raw, expected):
        assert parse_quantity(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "-2", "2.5", "1e3", None, True, -1, "٣"])
    def test_invalid(self, raw):
        with pytest.raises(InputParseError):
            parse_quantity(raw)


class TestSet:
    def test_positive_value_is_stored(self):
        store = QuantityStore()
        assert store.set("a", "4") == 4
        assert store.get("a") == 4
        assert "a" in store

    def test_zero_removes_entry(self):
        store = QuantityStore()
        store.set("a", "4")
        assert store.set("a", "0") == 0
        assert "a" not in store
        assert len(store) == 0

    def test_invalid_input_removes_entry_silently(self):
        store = QuantityStore()
        store.set("a", 2)
        store.set("a", "two")
        assert "a" not in store
        assert store.get("a") == 0

    def test_never_stores_zero(self):
        store = QuantityStore()
        for raw in ["0", "", "x", "-3", 0]:
            store.set("a", raw)
        assert store.as_dict() == {}


class TestBulkLoad:
    def test_only_current_product_variants_are_loaded(self, tee_index):
        store = QuantityStore()
        store.set("v-S-White", 9)
        count = store.bulk_load(
            [("v-S-Black", 2), ("v-M-Black", 3), ("other-product", 5)], tee_index
        )
        assert count == 5
        assert store.as_dict() == {"v-S-Black": 2, "v-M-Black": 3}

    def test_nothing_matching_keeps_cart(self, tee_index):
        store = QuantityStore()
        store.set("v-S-White", 9)
        count = store.bulk_load([("other-product", 5), (None, 2)], tee_index)
        assert count == 0
        assert store.as_dict() == {"v-S-White": 9}

    def test_non_positive_quantities_skipped(self, tee_index):
        store = QuantityStore()
        count = store.bulk_load([("v-S-Black", 0), ("v-M-Black", -1), ("v-L-White", 4)], tee_index)
        assert count == 4
        assert store.as_dict() == {"v-L-White": 4}


class TestTotals:
    def test_total_and_clear(self):
        store = QuantityStore()
        store.set("a", 2)
        store.set("b", "5")
        assert store.total() == 7
        store.clear()
        assert store.total() == 0
        assert store.items() == []
