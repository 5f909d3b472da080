"""Draft order submission: cart -> backend input, backend reply -> result."""

from __future__ import annotations

from typing import Any

from matrix_order.backend import CommerceBackend
from matrix_order.config import APP_TAG, DISCOUNT_DESCRIPTION
from matrix_order.errors import BackendValidationError, EmptyCartError, OversellError
from matrix_order.models import CreatedOrder, DiscountSetting, OrderSummary
from matrix_order.quantities import QuantityStore


def check_submittable(summary: OrderSummary) -> None:
    """Client-side gate run before anything is sent."""
    if summary.total_items <= 0:
        raise EmptyCartError()
    if summary.has_overselling:
        raise OversellError()


def build_note(po_number: str | None, note: str | None) -> str:
    final_note = note or ""
    if po_number:
        final_note = f"PO#: {po_number}\n{final_note}"
    return final_note


def build_tags(po_number: str | None) -> list[str]:
    if po_number:
        return [f"PO_{po_number}", APP_TAG]
    return [APP_TAG]


def build_draft_order_input(
    quantities: QuantityStore,
    customer_id: str | None = None,
    po_number: str | None = None,
    note: str | None = None,
    discount: DiscountSetting | None = None,
) -> dict[str, Any]:
    """Build the backend draft order input for the current cart."""
    line_items = [
        {"variantId": variant_id, "quantity": quantity}
        for variant_id, quantity in quantities.items()
        if quantity > 0
    ]
    if not line_items:
        raise EmptyCartError()

    po_number = (po_number or "").strip()
    draft_input: dict[str, Any] = {
        "lineItems": line_items,
        "note": build_note(po_number, note),
        "tags": build_tags(po_number),
    }

    if discount is not None and discount.is_active:
        draft_input["appliedDiscount"] = {
            "description": DISCOUNT_DESCRIPTION,
            "value": float(discount.value),
            "valueType": discount.kind.value,
        }

    if customer_id:
        draft_input["customerId"] = customer_id

    return draft_input


def submit_draft_order(
    backend: CommerceBackend,
    quantities: QuantityStore,
    customer_id: str | None = None,
    po_number: str | None = None,
    note: str | None = None,
    discount: DiscountSetting | None = None,
) -> CreatedOrder:
    """Create a draft order and return it.

    The cart is not touched here; resetting it after success is up to the
    caller.
    """
    draft_input = build_draft_order_input(quantities, customer_id, po_number, note, discount)
    result = backend.create_draft_order(draft_input)

    if result.user_errors:
        first = result.user_errors[0]
        raise BackendValidationError(first.message, first.field)
    if result.order is None:
        raise BackendValidationError("Draft order was not created")
    return result.order
