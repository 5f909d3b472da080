"""Rendering helpers for the quantity grid, totals footer and side panes."""

from __future__ import annotations

import re
from datetime import datetime

from rich.table import Table
from rich.text import Text

from matrix_order.models import Customer, DiscountKind, OrderSummary, Product, RecentOrder, Variant
from matrix_order.navigation import Cell
from matrix_order.quantities import QuantityStore
from matrix_order.summary import format_money, is_oversold
from matrix_order.variant_index import VariantIndex

UNAVAILABLE_MARK = "×"
_COLOR_OPTION = re.compile(r"colou?r", re.IGNORECASE)

OVERSELL_STYLE = "bold #ffffff on #d82c0d"
FOCUS_STYLE = "bold #0b1f0f on #5fbf72"
MUTED_STYLE = "#8a8f94"


def is_color_option(name: str) -> bool:
    return bool(_COLOR_OPTION.search(name))


def option_badge(name: str) -> Text:
    """Header label for an option with a color or size marker."""
    text = Text()
    if is_color_option(name):
        text.append("◐ ", style="bold #b48ead")
    else:
        text.append("↕ ", style="bold #88c0d0")
    text.append(name, style="bold")
    return text


def format_product_header(product: Product) -> Text:
    """Title line with an image marker, option names and the image location when there is one."""
    text = Text()
    text.append("▣ " if product.image_url else "□ ", style=MUTED_STYLE)
    text.append(product.title, style="bold")
    text.append("  ")
    text.append(" / ".join(option.name for option in product.options), style=MUTED_STYLE)
    if product.image_url:
        text.append(f"\n  {product.image_url}", style=f"{MUTED_STYLE} underline")
    return text


def format_cell(variant: Variant | None, quantity: int, focused: bool, typing: str | None = None) -> Text:
    """Render one grid cell: price, quantity and stock."""
    text = Text(justify="center")
    if variant is None:
        text.append(UNAVAILABLE_MARK, style=MUTED_STYLE)
        return text

    stock = variant.stock
    oversold = is_oversold(quantity, stock)
    shown = typing if focused and typing is not None else (str(quantity) if quantity else "-")

    text.append(f"${format_money(variant.price)}\n", style=MUTED_STYLE)
    if focused:
        qty_style = FOCUS_STYLE
    elif oversold:
        qty_style = OVERSELL_STYLE
    else:
        qty_style = "bold"
    text.append(f" {shown:>3} ", style=qty_style)
    text.append("\n")

    if stock <= 0:
        text.append("Out", style="bold #d82c0d")
    else:
        text.append(str(stock), style="#d82c0d" if oversold else MUTED_STYLE)
        if oversold:
            text.append(" !", style="bold #d82c0d")
    return text


def build_grid(
    index: VariantIndex, quantities: QuantityStore, cursor: Cell, typing: str | None = None
) -> Table:
    """Matrix table for two options, list table for one."""
    table = Table(expand=True, show_lines=True, header_style="bold")
    row_option = index.row_option
    col_option = index.col_option

    if col_option is None:
        table.add_column(option_badge(row_option.name))
        table.add_column("Qty", justify="center")
        for row, value in enumerate(row_option.values):
            variant = index.cell(row)
            qty = quantities.get(variant.variant_id) if variant else 0
            table.add_row(Text(value, style="bold"), format_cell(variant, qty, cursor == (row, 0), typing))
        return table

    corner = option_badge(row_option.name)
    corner.append(" / ", style=MUTED_STYLE)
    corner.append_text(option_badge(col_option.name))
    table.add_column(corner)
    for value in col_option.values:
        table.add_column(value, justify="center")

    for row, row_value in enumerate(row_option.values):
        cells: list[Text] = [Text(row_value, style="bold")]
        for col in range(index.col_count):
            variant = index.cell(row, col)
            qty = quantities.get(variant.variant_id) if variant else 0
            cells.append(format_cell(variant, qty, cursor == (row, col), typing))
        table.add_row(*cells)
    return table


def submit_label(summary: OrderSummary, customer: Customer | None, submitting: bool = False) -> Text:
    """Label of the submit trigger for the current cart."""
    if submitting:
        return Text(" Creating order... ", style="bold #ffffff on #5c5f62")
    if summary.has_overselling:
        return Text(" Not Enough Stock ", style=OVERSELL_STYLE)
    if summary.total_items <= 0:
        return Text(" Add quantities ", style="#ffffff on #5c5f62")
    if customer is not None:
        return Text(f" Create Order for {customer.display_name} ", style="bold #ffffff on #007a5c")
    return Text(" Create Draft Order ", style="bold #ffffff on #007a5c")


def format_totals(summary: OrderSummary) -> Text:
    text = Text()
    text.append("TOTAL ESTIMATE  ", style=MUTED_STYLE)
    if summary.discount_amount > 0:
        text.append(f"${format_money(summary.subtotal)}", style="strike #999999")
        text.append(" ")
    text.append(f"${format_money(summary.final_total)}", style="bold")
    text.append(f"  ({summary.total_items} items)", style=MUTED_STYLE)
    return text


def format_order_fields(po_number: str, note: str, discount_raw: str, discount_kind: DiscountKind) -> Text:
    """PO number, note and discount inputs as one block."""
    text = Text()
    text.append("PO Number: ", style="bold")
    text.append(po_number or "-")
    text.append("   Note: ", style="bold")
    text.append(note or "-")
    text.append("\nDiscount: ", style="bold")
    text.append(discount_raw or "0.00")
    text.append("  ")
    for kind, symbol in ((DiscountKind.FIXED_AMOUNT, "$"), (DiscountKind.PERCENTAGE, "%")):
        style = "bold #007a5c on #e3f1df" if kind == discount_kind else MUTED_STYLE
        text.append(f" {symbol} ", style=style)
    return text


def format_customer(customer: Customer | None) -> Text:
    if customer is None:
        return Text("+ Add Customer (c)", style="bold #2c6ecb")
    text = Text()
    text.append(customer.display_name[:1].upper() or "?", style="bold #ffffff on #2c6ecb")
    text.append(f" {customer.display_name}\n", style="bold")
    text.append(f"  {customer.email}", style=MUTED_STYLE)
    return text


def format_timestamp(created_at: str) -> str:
    try:
        return datetime.fromisoformat(created_at).strftime("%b %d %H:%M")
    except ValueError:
        return created_at


def format_recent_orders(orders: list[RecentOrder], selected: int | None) -> Text:
    if not orders:
        return Text("(no recent orders)", style=MUTED_STYLE)
    text = Text()
    for idx, order in enumerate(orders):
        if idx > 0:
            text.append("\n")
        pointer = "➤ " if idx == selected else "  "
        text.append(pointer)
        text.append(f"{order.name}", style="bold")
        text.append(f"  {order.customer or 'No Customer'}")
        text.append(f"  {format_timestamp(order.created_at)}", style=MUTED_STYLE)
    return text


def format_breakdown(summary: OrderSummary) -> Text:
    """Full line-by-line breakdown for the summary modal."""
    text = Text()
    text.append("Subtotal  ", style=MUTED_STYLE)
    text.append(f"${format_money(summary.subtotal)}\n", style="bold")
    if summary.discount_amount > 0:
        text.append(f"- ${format_money(summary.discount_amount)} Discount\n", style="bold #d82c0d")
    text.append("Total     ", style=MUTED_STYLE)
    text.append(f"${format_money(summary.final_total)}", style="bold")
    text.append(f"  {summary.total_items} Items\n", style=MUTED_STYLE)

    if not summary.lines:
        text.append("\n(no items)", style=MUTED_STYLE)
        return text

    for line in summary.lines:
        text.append("\n")
        text.append(line.title, style="bold")
        text.append(f"\n  {line.quantity} × ${format_money(line.unit_price)} each", style=MUTED_STYLE)
        text.append(f"  ${format_money(line.line_total)}", style="bold")
    return text
