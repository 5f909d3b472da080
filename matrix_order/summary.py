"""Order summary: priced lines, discount, totals and overselling."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from matrix_order.errors import StaleReferenceError
from matrix_order.models import DiscountKind, DiscountSetting, LineItem, OrderSummary
from matrix_order.quantities import QuantityStore
from matrix_order.variant_index import VariantIndex

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    return f"{to_cents(value):.2f}"


def discount_amount(subtotal: Decimal, discount: DiscountSetting | None) -> Decimal:
    """Discount for a subtotal. Fixed amounts are applied as given, uncapped."""
    if discount is None or not discount.is_active:
        return ZERO
    if discount.kind == DiscountKind.PERCENTAGE:
        return to_cents(subtotal * discount.value / 100)
    return to_cents(discount.value)


def is_oversold(quantity: int, stock: int) -> bool:
    """More than a known positive stock. Zero stock is blocked at entry instead."""
    return stock > 0 and quantity > stock


def compute_summary(
    quantities: QuantityStore,
    index: VariantIndex | None,
    discount: DiscountSetting | None = None,
) -> OrderSummary:
    """Recompute the whole summary from the cart.

    Each line total is rounded to cents before it is added to the subtotal, so
    displayed line totals always add up to the displayed subtotal. Entries for
    variants the index does not know are skipped.
    """
    if index is None:
        return OrderSummary()

    lines: list[LineItem] = []
    total_items = 0
    subtotal = ZERO
    has_overselling = False

    for variant_id, quantity in quantities.items():
        if quantity <= 0:
            continue
        try:
            variant = index.require(variant_id)
        except StaleReferenceError:
            continue

        if is_oversold(quantity, variant.stock):
            has_overselling = True

        line_total = to_cents(variant.price * quantity)
        total_items += quantity
        subtotal += line_total
        lines.append(
            LineItem(
                variant_id=variant_id,
                title=index.line_title(variant),
                quantity=quantity,
                unit_price=to_cents(variant.price),
                line_total=line_total,
            )
        )

    discount_value = discount_amount(subtotal, discount)
    final_total = max(ZERO, subtotal - discount_value)

    return OrderSummary(
        lines=tuple(lines),
        total_items=total_items,
        subtotal=subtotal,
        discount_amount=discount_value,
        final_total=final_total,
        has_overselling=has_overselling,
    )
