"""Tests for the order summary engine."""

from decimal import Decimal

import pytest

from matrix_order.models import DiscountKind, DiscountSetting, Product, ProductOption, Variant
from matrix_order.quantities import QuantityStore
from matrix_order.summary import compute_summary, format_money, is_oversold
from matrix_order.variant_index import VariantIndex


def _store(**quantities):
    store = QuantityStore()
    for variant_id, qty in quantities.items():
        store.set(variant_id.replace("_", "-"), qty)
    return store


def _fixed(value):
    return DiscountSetting(DiscountKind.FIXED_AMOUNT, Decimal(value))


def _percent(value):
    return DiscountSetting(DiscountKind.PERCENTAGE, Decimal(value))


class TestLines:
    def test_lines_and_totals(self, tee_index):
        summary = compute_summary(_store(v_S_Black=2, v_XL_Black=1), tee_index)

        assert [line.title for line in summary.lines] == ["Size: S | Color: Black", "Size: XL | Color: Black"]
        assert summary.lines[0].unit_price == Decimal("18.00")
        assert summary.lines[0].line_total == Decimal("36.00")
        assert summary.total_items == 3
        assert summary.subtotal == Decimal("56.50")
        assert summary.discount_amount == Decimal("0.00")
        assert summary.final_total == Decimal("56.50")

    def test_stale_variant_is_skipped(self, tee_index):
        store = _store(v_S_Black=2)
        store.set("gone-variant", 5)
        summary = compute_summary(store, tee_index)
        assert summary.total_items == 2
        assert len(summary.lines) == 1

    def test_total_items_matches_known_quantities(self, tee_index):
        store = _store(v_S_Black=2, v_M_White=1, v_L_White=4)
        store.set("stale", 9)
        summary = compute_summary(store, tee_index)
        known = sum(qty for vid, qty in store.items() if vid in tee_index)
        assert summary.total_items == known == 7

    def test_recomputing_is_idempotent(self, tee_index):
        store = _store(v_S_Black=2, v_M_White=1)
        discount = _percent("10")
        assert compute_summary(store, tee_index, discount) == compute_summary(store, tee_index, discount)

    def test_without_product_summary_is_empty(self):
        summary = compute_summary(_store(a=1), None)
        assert summary.total_items == 0
        assert summary.lines == ()
        assert format_money(summary.final_total) == "0.00"


class TestDiscounts:
    def test_fixed_amount(self, tee_index):
        summary = compute_summary(_store(v_S_Black=2), tee_index, _fixed("5"))
        assert summary.discount_amount == Decimal("5.00")
        assert summary.final_total == Decimal("31.00")

    def test_fixed_amount_above_subtotal_clamps_total(self, tee_index):
        summary = compute_summary(_store(v_S_Black=2), tee_index, _fixed("50"))
        assert summary.discount_amount == Decimal("50.00")
        assert summary.final_total == Decimal("0.00")

    @pytest.mark.parametrize("subtotal_qty, discount", [(0, "0"), (1, "18"), (3, "54.01"), (2, "0.5")])
    def test_final_total_never_negative(self, tee_index, subtotal_qty, discount):
        summary = compute_summary(_store(v_S_Black=subtotal_qty), tee_index, _fixed(discount))
        assert summary.final_total == max(Decimal("0"), summary.subtotal - Decimal(discount))
        assert summary.final_total >= 0

    def test_percentage(self, tee_index):
        summary = compute_summary(_store(v_S_Black=3), tee_index, _percent("12.5"))
        assert summary.subtotal == Decimal("54.00")
        assert summary.discount_amount == Decimal("6.75")
        assert summary.final_total == Decimal("47.25")

    def test_percentage_rounds_half_up(self, tee_index):
        # 36.00 * 0.125% = 0.045 -> 0.05
        summary = compute_summary(_store(v_S_Black=2), tee_index, _percent("0.125"))
        assert summary.discount_amount == Decimal("0.05")

    def test_zero_discount_is_ignored(self, tee_index):
        summary = compute_summary(_store(v_S_Black=1), tee_index, _percent("0"))
        assert summary.discount_amount == Decimal("0.00")
        assert summary.final_total == summary.subtotal


class TestOverselling:
    def test_more_than_positive_stock(self, tee_index):
        assert compute_summary(_store(v_M_White=4), tee_index).has_overselling

    def test_within_stock(self, tee_index):
        assert not compute_summary(_store(v_M_White=3, v_S_Black=25), tee_index).has_overselling

    def test_zero_stock_is_not_counted(self, tee_index):
        assert not compute_summary(_store(v_L_Black=2), tee_index).has_overselling

    def test_any_line_flags_the_order(self, tee_index):
        assert compute_summary(_store(v_S_Black=1, v_M_White=9), tee_index).has_overselling

    def test_is_oversold(self):
        assert is_oversold(5, 4)
        assert not is_oversold(4, 4)
        assert not is_oversold(5, 0)


class TestRounding:
    @pytest.fixture
    def odd_cent_index(self):
        product = Product(
            product_id="p",
            title="Bulk",
            options=(ProductOption("Pack", ("A", "B")),),
            variants=(
                Variant("a", Decimal("0.335"), (("Pack", "A"),), 100),
                Variant("b", Decimal("0.335"), (("Pack", "B"),), 100),
            ),
        )
        return VariantIndex(product)

    def test_each_line_is_rounded_before_summing(self, odd_cent_index):
        store = QuantityStore()
        store.set("a", 3)
        store.set("b", 3)
        summary = compute_summary(store, odd_cent_index)
        assert [line.line_total for line in summary.lines] == [Decimal("1.01"), Decimal("1.01")]
        assert summary.subtotal == Decimal("2.02")

    def test_format_money(self):
        assert format_money(Decimal("3")) == "3.00"
        assert format_money(Decimal("2.005")) == "2.01"


class TestDiscountSetting:
    @pytest.mark.parametrize("raw", [None, "", "  ", "abc", "0", "-4", "NaN", "Infinity"])
    def test_inactive_inputs(self, raw):
        setting = DiscountSetting.from_raw(DiscountKind.PERCENTAGE, raw)
        assert not setting.is_active
        assert setting.kind == DiscountKind.PERCENTAGE

    def test_active_input(self):
        setting = DiscountSetting.from_raw(DiscountKind.FIXED_AMOUNT, " 7.5 ")
        assert setting.is_active
        assert setting.value == Decimal("7.5")
