"""Thermal printer tickets for created draft orders."""

from __future__ import annotations

import os
from pathlib import Path

from matrix_order.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from matrix_order.models import CreatedOrder, Customer, OrderSummary
from matrix_order.summary import format_money

_RULE_HEIGHT_PX = 12
_RULE_THICKNESS_PX = 3
_TEXT_PADDING_PX = 14
_FONT_OVERRIDE_ENV = "MATRIX_ORDER_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)

HEADER = "header"
LINE = "line"
DETAIL = "detail"
SEPARATOR = "separator"
TOTAL = "total"


def ticket_rows(
    order: CreatedOrder,
    summary: OrderSummary,
    customer: Customer | None = None,
    po_number: str = "",
) -> list[tuple[str, str]]:
    """Lay out a ticket as (kind, text) rows before anything is rendered."""
    rows: list[tuple[str, str]] = [(HEADER, order.name)]
    if customer is not None:
        rows.append((DETAIL, customer.display_name))
    if po_number:
        rows.append((DETAIL, f"PO#: {po_number}"))
    rows.append((SEPARATOR, ""))

    for line in summary.lines:
        rows.append((LINE, line.title))
        rows.append((DETAIL, f"    {line.quantity} x ${format_money(line.unit_price)} = ${format_money(line.line_total)}"))

    rows.append((SEPARATOR, ""))
    rows.append((DETAIL, f"Subtotal ${format_money(summary.subtotal)}"))
    if summary.discount_amount > 0:
        rows.append((DETAIL, f"Discount -${format_money(summary.discount_amount)}"))
    rows.append((TOTAL, f"Total ${format_money(summary.final_total)} ({summary.total_items} items)"))
    return rows


def _font_candidates() -> list[str]:
    override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    ordered = [override, PRINTER_FONT_PATH, *_LINUX_FONT_FALLBACKS]
    return list(dict.fromkeys(path for path in ordered if path))


def resolve_printer_font_path() -> str:
    """First existing font among the env override, the configured path and common Linux fonts."""
    candidates = _font_candidates()
    for candidate in candidates:
        if Path(candidate).is_file():
            return candidate
    raise RuntimeError(
        f"No printer font found (set {_FONT_OVERRIDE_ENV}); looked in: {', '.join(candidates)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Report whether a ticket could be printed right now."""
    try:
        import escpos.printer  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Ticket printing unavailable: {exc}")
    return (True, "Ticket printer ready")


def _truncate(text: str, font: object, max_width_px: int) -> str:
    if font.getlength(text) <= max_width_px:
        return text
    while text and font.getlength(f"{text}...") > max_width_px:
        text = text[:-1]
    return f"{text}..."


def _blank(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def _text_strip(text: str, font: object) -> object:
    from PIL import ImageDraw

    text = _truncate(text, font, PRINTER_WIDTH_PX - 2 * PRINTER_LEFT_INDENT_PX)
    left, top, right, bottom = font.getbbox(text)
    img = _blank(max(12, bottom - top + _TEXT_PADDING_PX))
    # Shift by the bbox top so descenders stay on the strip.
    y = (img.height - (bottom - top)) // 2 - top
    ImageDraw.Draw(img).text((PRINTER_LEFT_INDENT_PX, y), text, font=font, fill=0)
    return img


def _rule() -> object:
    from PIL import ImageDraw

    img = _blank(_RULE_HEIGHT_PX)
    top = (_RULE_HEIGHT_PX - _RULE_THICKNESS_PX) // 2
    ImageDraw.Draw(img).rectangle((0, top, PRINTER_WIDTH_PX - 1, top + _RULE_THICKNESS_PX - 1), fill=0)
    return img


def render_ticket(rows: list[tuple[str, str]], font_path: str) -> list[object]:
    """Render ticket rows to 1-bit image strips in print order."""
    from PIL import ImageFont

    fonts = {
        HEADER: ImageFont.truetype(font_path, PRINTER_FONT_SIZE + 12),
        TOTAL: ImageFont.truetype(font_path, PRINTER_FONT_SIZE + 12),
        LINE: ImageFont.truetype(font_path, PRINTER_FONT_SIZE),
        DETAIL: ImageFont.truetype(font_path, max(10, PRINTER_FONT_SIZE - 8)),
    }
    strips = [_rule() if kind == SEPARATOR else _text_strip(text, fonts[kind]) for kind, text in rows]
    strips.append(_blank(PRINTER_TAIL_SPACER_PX))
    return strips


def print_order_ticket(
    order: CreatedOrder,
    summary: OrderSummary,
    customer: Customer | None = None,
    po_number: str = "",
) -> None:
    """Print a ticket for a created draft order and cut it."""
    if not summary.lines:
        return

    try:
        from escpos.printer import Usb
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    strips = render_ticket(ticket_rows(order, summary, customer, po_number), resolve_printer_font_path())
    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    for strip in strips:
        printer.image(strip)
    printer.cut()
