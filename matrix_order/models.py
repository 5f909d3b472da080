"""Domain models for matrix-quick-order."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum


@dataclass(frozen=True)
class ProductOption:
    """A product option such as Size or Color, with its values in display order."""

    name: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class Variant:
    """One purchasable combination of option values."""

    variant_id: str
    price: Decimal
    selected_options: tuple[tuple[str, str], ...]
    inventory_quantity: int | None = None
    title: str = ""

    @property
    def stock(self) -> int:
        return self.inventory_quantity or 0

    def option_value(self, option_name: str) -> str | None:
        for name, value in self.selected_options:
            if name == option_name:
                return value
        return None


@dataclass(frozen=True)
class Product:
    """A catalog product with one or more options and its variants."""

    product_id: str
    title: str
    options: tuple[ProductOption, ...]
    variants: tuple[Variant, ...]
    image_url: str | None = None


@dataclass(frozen=True)
class Customer:
    """A customer directory match."""

    customer_id: str
    display_name: str
    email: str = ""


@dataclass(frozen=True)
class RecentOrder:
    """An open draft order previously created by this tool."""

    order_id: str
    name: str
    created_at: str
    customer: str
    url: str | None = None
    items: tuple[tuple[str, int], ...] = ()


class DiscountKind(str, Enum):
    FIXED_AMOUNT = "FIXED_AMOUNT"
    PERCENTAGE = "PERCENTAGE"


@dataclass(frozen=True)
class DiscountSetting:
    """An order-level discount. A zero value means no discount."""

    kind: DiscountKind = DiscountKind.FIXED_AMOUNT
    value: Decimal = Decimal("0")

    @classmethod
    def from_raw(cls, kind: DiscountKind, raw: str | None) -> DiscountSetting:
        """Parse a typed discount value; blank or invalid input means no discount."""
        text = (raw or "").strip()
        if not text:
            return cls(kind=kind)
        try:
            value = Decimal(text)
        except InvalidOperation:
            return cls(kind=kind)
        if not value.is_finite() or value <= 0:
            return cls(kind=kind)
        return cls(kind=kind, value=value)

    @property
    def is_active(self) -> bool:
        return self.value > 0


@dataclass(frozen=True)
class LineItem:
    """A priced order line derived from a cart entry."""

    variant_id: str
    title: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class OrderSummary:
    """Totals derived from the cart. Never stored, always recomputed."""

    lines: tuple[LineItem, ...] = ()
    total_items: int = 0
    subtotal: Decimal = Decimal("0.00")
    discount_amount: Decimal = Decimal("0.00")
    final_total: Decimal = Decimal("0.00")
    has_overselling: bool = False


@dataclass(frozen=True)
class UserError:
    """A validation error reported by the commerce backend."""

    message: str
    field: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreatedOrder:
    """A draft order confirmed by the commerce backend."""

    order_id: str
    name: str
    invoice_url: str | None = None

    @property
    def admin_path(self) -> str:
        """Admin location of the draft order, from the numeric tail of its id."""
        return f"draft_orders/{self.order_id.rsplit('/', 1)[-1]}"


@dataclass
class DraftOrderResult:
    """Backend reply to a draft order submission."""

    order: CreatedOrder | None = None
    user_errors: list[UserError] = field(default_factory=list)
