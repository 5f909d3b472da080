"""Main Textual app class."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key, Paste
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from matrix_order.backend import CommerceBackend
from matrix_order.breakdown_modal import BreakdownModal
from matrix_order.config import CUSTOMER_SEARCH_MIN_CHARS, DEBUG_LOG_PATH, PRINT_TICKETS
from matrix_order.constant import TIPS
from matrix_order.errors import (
    BackendValidationError,
    EmptyCartError,
    IncompatibleProductError,
    MatrixOrderError,
    OversellError,
)
from matrix_order.field_modal import FieldModal, decimal_chars
from matrix_order.models import Customer, DiscountKind, DiscountSetting, OrderSummary, Product, RecentOrder
from matrix_order.navigation import Cell, is_navigation_key, navigate, paste_updates
from matrix_order.picker_modal import PickerModal, PickerRow
from matrix_order.printer import check_printer_dependencies, print_order_ticket
from matrix_order.quantities import QuantityStore
from matrix_order.rendering import (
    build_grid,
    format_customer,
    format_order_fields,
    format_product_header,
    format_recent_orders,
    format_totals,
    submit_label,
)
from matrix_order.submission import check_submittable, submit_draft_order
from matrix_order.summary import compute_summary
from matrix_order.variant_index import VariantIndex

_MAX_TYPED_DIGITS = 6


class QuickOrderApp(App):
    """A Textual app for entering variant quantities and creating draft orders."""

    TITLE = "Matrix Quick Order"
    SUB_TITLE = "Size / Color grid"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #grid-pane {
        width: 3fr;
        border: round $primary;
        padding: 0 1;
        overflow-y: auto;
    }

    #side-pane {
        width: 1fr;
        min-width: 32;
        border: round $secondary;
        padding: 0 1;
    }

    #tip-banner {
        color: #007a5c;
        background: #e3f1df;
        padding: 0 1;
    }

    #order-fields {
        border-top: dashed $surface;
        padding: 1 0 0 0;
    }

    #action-footer {
        border: heavy $secondary;
        padding: 0 1;
        height: auto;
    }

    #recent-orders {
        height: 1fr;
    }

    #status-bar {
        border: tall $surface;
        padding: 0 1;
        height: auto;
    }

    .pane-title {
        text-style: bold;
        margin: 1 0 0 0;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "submit_order", "Create draft order", priority=True),
        ("ctrl+q", "quit", "Quit"),
    ]

    COMMAND_KEYS = {
        "p": "pick_product",
        "c": "pick_customer",
        "C": "detach_customer",
        "o": "edit_po_number",
        "n": "edit_note",
        "d": "edit_discount",
        "t": "toggle_discount_kind",
        "b": "show_breakdown",
        "x": "clear_cart",
        "j": "next_recent_order",
        "k": "previous_recent_order",
        "l": "repeat_recent_order",
        "?": "next_tip",
        "h": "hide_tips",
    }

    def __init__(
        self,
        backend: CommerceBackend,
        product_id: str | None = None,
        print_tickets: bool = PRINT_TICKETS,
        debug_log_path: str | Path = DEBUG_LOG_PATH,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.initial_product_id = product_id
        self.print_tickets = print_tickets
        self.product: Product | None = None
        self.index: VariantIndex | None = None
        self.incompatible_message = ""
        self.quantities = QuantityStore()
        self.cursor: Cell = (0, 0)
        self.typing: str | None = None
        self.customer: Customer | None = None
        self.po_number = ""
        self.note = ""
        self.discount_raw = ""
        self.discount_kind = DiscountKind.FIXED_AMOUNT
        self.recent_orders: list[RecentOrder] = []
        self.recent_selected_index: int | None = None
        self.submitting = False
        self.system_status = ""
        self.status_is_error = False
        self.tip_index = 0
        self.tips_visible = True
        self._customer_results: dict[str, Customer] = {}
        self._debug_log_path = Path(debug_log_path)
        self._log_debug("app_init")

    def _log_debug(self, message: str) -> None:
        try:
            ts = datetime.now(timezone.utc).isoformat()
            self._debug_log_path.parent.mkdir(parents=True, exist_ok=True)
            with self._debug_log_path.open("a", encoding="utf-8") as fh:
                fh.write(f"{ts} {message}\n")
        except OSError:
            # Logging must never interfere with app flow.
            return

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="grid-pane"):
                yield Static(id="product-header", classes="pane-title")
                yield Static(id="tip-banner")
                yield Static(id="grid")
                yield Static(id="order-fields")
            with Vertical(id="side-pane"):
                yield Static("Customer", classes="pane-title")
                yield Static(id="customer-card")
                yield Static("Recent Orders", classes="pane-title")
                yield Static(id="recent-orders")
                yield Static(id="status-bar")
        yield Static(id="action-footer")

    def on_mount(self) -> None:
        if self.print_tickets:
            _, msg = check_printer_dependencies()
            self.system_status = msg
            self._log_debug(f"on_mount printer_status={msg!r}")
        if self.initial_product_id:
            self.load_product(self.initial_product_id)
        else:
            self._reload_recent_orders()
        self._refresh_all()

    # Notifications

    def notify_status(self, message: str, is_error: bool = False) -> None:
        """Show a message in the status bar and as a toast."""
        self.system_status = message
        self.status_is_error = is_error
        self._log_debug(f"notify error={is_error} message={message!r}")
        self._refresh_status()
        self.notify(message, severity="error" if is_error else "information", markup=False)

    # Keyboard and paste

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return

        self._log_debug(f"on_key key={event.key!r} char={event.character!r} cursor={self.cursor}")

        if event.key == "ctrl+s":
            self.action_submit_order()
            event.stop()
            return

        if self.index is not None:
            if is_navigation_key(event.key, self.index.is_matrix):
                self._move_cursor(event.key)
                event.stop()
                return
            if event.is_printable and event.character and event.character.isdigit():
                self._type_digit(event.character)
                event.stop()
                return
            if event.key == "backspace":
                self._backspace_cell()
                event.stop()
                return
            if event.key == "delete":
                self._clear_cell()
                event.stop()
                return

        if not event.is_printable or not event.character:
            return
        action = self.COMMAND_KEYS.get(event.character)
        if action is None:
            return
        getattr(self, f"action_{action}")()
        event.stop()

    def on_paste(self, event: Paste) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        self.paste_text(event.text)
        event.stop()

    def paste_text(self, text: str) -> int:
        """Fill cells downward from the cursor with pasted lines."""
        if self.index is None:
            return 0
        updates = paste_updates(text, self.cursor, self.index)
        for variant_id, quantity in updates:
            self.quantities.set(variant_id, quantity)
        self.typing = None
        self._log_debug(f"paste cursor={self.cursor} lines={len(text.splitlines())} applied={len(updates)}")
        self._refresh_cart()
        return len(updates)

    def _move_cursor(self, key: str) -> None:
        target = navigate(key, self.cursor, self.index)
        if target is None:
            return
        self.cursor = target
        self.typing = None
        self._refresh_grid()

    def _editable_variant_id(self) -> str | None:
        if self.index is None:
            return None
        variant = self.index.cell(*self.cursor)
        if variant is None or variant.stock <= 0:
            return None
        return variant.variant_id

    def _type_digit(self, digit: str) -> None:
        variant_id = self._editable_variant_id()
        if variant_id is None:
            return
        # First keystroke after a focus move replaces the cell value.
        typed = (self.typing or "") + digit
        if len(typed) > _MAX_TYPED_DIGITS:
            return
        self.typing = typed
        self.quantities.set(variant_id, typed)
        self._refresh_cart()

    def _backspace_cell(self) -> None:
        variant_id = self._editable_variant_id()
        if variant_id is None:
            return
        if self.typing is None:
            current = self.quantities.get(variant_id)
            self.typing = str(current) if current else ""
        self.typing = self.typing[:-1]
        self.quantities.set(variant_id, self.typing)
        self._refresh_cart()

    def _clear_cell(self) -> None:
        variant_id = self._editable_variant_id()
        if variant_id is None:
            return
        self.quantities.set(variant_id, "")
        self.typing = None
        self._refresh_cart()

    # Product and customer

    def load_product(self, product_id: str) -> None:
        """Switch to another product; the cart and customer start empty."""
        try:
            product = self.backend.fetch_product(product_id)
        except MatrixOrderError as exc:
            self.notify_status(str(exc), is_error=True)
            return
        if product is None:
            self.notify_status(f"Product not found: {product_id}", is_error=True)
            return

        self.product = product
        self.quantities.clear()
        self.customer = None
        self.cursor = (0, 0)
        self.typing = None
        try:
            self.index = VariantIndex(product)
            self.incompatible_message = ""
        except IncompatibleProductError as exc:
            self.index = None
            self.incompatible_message = str(exc)
        self._log_debug(f"load_product id={product_id} compatible={self.index is not None}")
        self._reload_recent_orders()
        self._refresh_all()

    def _search_products(self, query: str) -> list[PickerRow]:
        return [
            (product.product_id, product.title, " / ".join(option.name for option in product.options))
            for product in self.backend.list_products(query)
        ]

    def _search_customers(self, query: str) -> list[PickerRow]:
        customers = self.backend.search_customers(query)
        self._customer_results = {customer.customer_id: customer for customer in customers}
        return [(customer.customer_id, customer.display_name, customer.email) for customer in customers]

    def action_pick_product(self) -> None:
        self.push_screen(PickerModal("Select a Product", self._search_products), callback=self._on_product_picked)

    def _on_product_picked(self, product_id: str | None) -> None:
        if product_id:
            self.load_product(product_id)

    def action_pick_customer(self) -> None:
        self.push_screen(
            PickerModal("Select a Customer", self._search_customers, min_chars=CUSTOMER_SEARCH_MIN_CHARS),
            callback=self._on_customer_picked,
        )

    def _on_customer_picked(self, customer_id: str | None) -> None:
        if not customer_id:
            return
        self.customer = self._customer_results.get(customer_id)
        self._refresh_customer()
        self._refresh_footer()

    def action_detach_customer(self) -> None:
        self.customer = None
        self._refresh_customer()
        self._refresh_footer()

    # Order fields

    def action_edit_po_number(self) -> None:
        self.push_screen(FieldModal("PO Number", self.po_number, max_length=40), callback=self._on_po_number)

    def _on_po_number(self, value: str | None) -> None:
        if value is not None:
            self.po_number = value
            self._refresh_fields()

    def action_edit_note(self) -> None:
        self.push_screen(FieldModal("Order Note", self.note, max_length=500), callback=self._on_note)

    def _on_note(self, value: str | None) -> None:
        if value is not None:
            self.note = value
            self._refresh_fields()

    def action_edit_discount(self) -> None:
        symbol = "%" if self.discount_kind == DiscountKind.PERCENTAGE else "$"
        self.push_screen(
            FieldModal(f"Apply Discount ({symbol})", self.discount_raw, max_length=12, accept=decimal_chars),
            callback=self._on_discount,
        )

    def _on_discount(self, value: str | None) -> None:
        if value is not None:
            self.discount_raw = value
            self._refresh_fields()
            self._refresh_footer()

    def action_toggle_discount_kind(self) -> None:
        if self.discount_kind == DiscountKind.FIXED_AMOUNT:
            self.discount_kind = DiscountKind.PERCENTAGE
        else:
            self.discount_kind = DiscountKind.FIXED_AMOUNT
        self._refresh_fields()
        self._refresh_footer()

    def discount_setting(self) -> DiscountSetting:
        return DiscountSetting.from_raw(self.discount_kind, self.discount_raw)

    def current_summary(self) -> OrderSummary:
        return compute_summary(self.quantities, self.index, self.discount_setting())

    # Cart actions

    def action_show_breakdown(self) -> None:
        self.push_screen(BreakdownModal(self.current_summary()))

    def action_clear_cart(self) -> None:
        if self.quantities.total() <= 0:
            return
        self.quantities.clear()
        self.typing = None
        self._refresh_cart()
        self.notify_status("Cart cleared")

    def action_next_recent_order(self) -> None:
        self._move_recent_selection(1)

    def action_previous_recent_order(self) -> None:
        self._move_recent_selection(-1)

    def _move_recent_selection(self, delta: int) -> None:
        if not self.recent_orders:
            return
        if self.recent_selected_index is None:
            self.recent_selected_index = 0 if delta > 0 else len(self.recent_orders) - 1
        else:
            self.recent_selected_index = (self.recent_selected_index + delta) % len(self.recent_orders)
        self._refresh_recent()

    def action_repeat_recent_order(self) -> None:
        if self.recent_selected_index is None or not (0 <= self.recent_selected_index < len(self.recent_orders)):
            return
        self.load_recent_order(self.recent_orders[self.recent_selected_index])

    def load_recent_order(self, order: RecentOrder) -> int:
        """Replace the cart with a previous order's quantities for this product."""
        if self.index is None:
            self.notify_status("Select a compatible product first", is_error=True)
            return 0
        count = self.quantities.bulk_load(order.items, self.index)
        self._log_debug(f"repeat_order order={order.name} applied={count}")
        if count > 0:
            self.typing = None
            self._refresh_cart()
            self.notify_status(f"Loaded {count} items from {order.name}")
        else:
            self.notify_status("No matching items found for this product", is_error=True)
        return count

    def _reload_recent_orders(self) -> None:
        product_id = self.product.product_id if self.product is not None else None
        try:
            self.recent_orders = self.backend.recent_orders(product_id)
        except MatrixOrderError as exc:
            self.recent_orders = []
            self.notify_status(str(exc), is_error=True)
        self.recent_selected_index = 0 if self.recent_orders else None
        self._refresh_recent()

    def action_next_tip(self) -> None:
        self.tips_visible = True
        self.tip_index = (self.tip_index + 1) % len(TIPS)
        self._refresh_tips()

    def action_hide_tips(self) -> None:
        self.tips_visible = False
        self._refresh_tips()

    # Submission

    def action_submit_order(self) -> None:
        self._log_debug(f"submit_enter items={self.quantities.total()} submitting={self.submitting}")
        if self.submitting or isinstance(self.screen, ModalScreen):
            return
        if self.index is None:
            self.notify_status("Select a compatible product first", is_error=True)
            return

        summary = self.current_summary()
        try:
            check_submittable(summary)
        except (EmptyCartError, OversellError) as exc:
            self._log_debug(f"submit_blocked reason={exc}")
            self.notify_status(str(exc), is_error=True)
            return

        self.submitting = True
        self._refresh_footer()
        try:
            order = submit_draft_order(
                self.backend,
                self.quantities,
                customer_id=self.customer.customer_id if self.customer else None,
                po_number=self.po_number,
                note=self.note,
                discount=self.discount_setting(),
            )
        except BackendValidationError as exc:
            self._log_debug(f"submit_rejected message={exc.message!r}")
            self.notify_status(exc.message, is_error=True)
            return
        except MatrixOrderError as exc:
            self._log_debug(f"submit_failed error={exc!r}")
            self.notify_status(str(exc), is_error=True)
            return
        finally:
            self.submitting = False
            self._refresh_footer()

        self._log_debug(f"submit_created order_id={order.order_id} items={summary.total_items}")
        message = f"Order Created: {order.name} ({order.admin_path})"
        is_error = False
        if self.print_tickets:
            try:
                print_order_ticket(order, summary, self.customer, self.po_number)
            except Exception as exc:
                message = f"Created {order.name} but print failed: {exc}"
                is_error = True
                self._log_debug(f"submit_print_failed order_id={order.order_id} error={exc!r}")

        self.quantities.clear()
        self.typing = None
        self.po_number = ""
        self.note = ""
        self.discount_raw = ""
        self._reload_recent_orders()
        self._refresh_all()
        self.notify_status(message, is_error=is_error)

    # Rendering

    def _refresh_all(self) -> None:
        self._refresh_product_header()
        self._refresh_tips()
        self._refresh_grid()
        self._refresh_fields()
        self._refresh_customer()
        self._refresh_recent()
        self._refresh_footer()
        self._refresh_status()

    def _refresh_cart(self) -> None:
        self._refresh_grid()
        self._refresh_footer()

    def _static(self, selector: str) -> Static | None:
        try:
            return self.query_one(selector, Static)
        except NoMatches:
            return None

    def _refresh_product_header(self) -> None:
        widget = self._static("#product-header")
        if widget is None:
            return
        if self.product is None:
            widget.update("Select a Product. Press p to browse products.")
            return
        widget.update(format_product_header(self.product))

    def _refresh_tips(self) -> None:
        widget = self._static("#tip-banner")
        if widget is None:
            return
        widget.display = self.tips_visible and self.index is not None
        widget.update(f"Pro Tip: {TIPS[self.tip_index]}  (? next, h hide)")

    def _refresh_grid(self) -> None:
        widget = self._static("#grid")
        if widget is None:
            return
        if self.product is None:
            widget.update("")
            return
        if self.index is None:
            text = Text()
            text.append("Incompatible Product\n", style="bold #b98900")
            text.append(self.incompatible_message)
            text.append("\nPress p to select a different product.")
            widget.update(text)
            return
        widget.update(build_grid(self.index, self.quantities, self.cursor, self.typing))

    def _refresh_fields(self) -> None:
        widget = self._static("#order-fields")
        if widget is None:
            return
        widget.display = self.index is not None
        widget.update(format_order_fields(self.po_number, self.note, self.discount_raw, self.discount_kind))

    def _refresh_customer(self) -> None:
        widget = self._static("#customer-card")
        if widget is None:
            return
        widget.update(format_customer(self.customer))

    def _refresh_recent(self) -> None:
        widget = self._static("#recent-orders")
        if widget is None:
            return
        text = format_recent_orders(self.recent_orders, self.recent_selected_index)
        if self.recent_orders:
            text.append("\nj/k select, l repeat", style="#8a8f94")
        widget.update(text)

    def _refresh_footer(self) -> None:
        widget = self._static("#action-footer")
        if widget is None:
            return
        summary = self.current_summary()
        text = format_totals(summary)
        text.append("   ")
        text.append_text(submit_label(summary, self.customer, self.submitting))
        text.append("   b breakdown · x clear · Ctrl+S create · Ctrl+Q quit", style="#8a8f94")
        widget.update(text)

    def _refresh_status(self) -> None:
        widget = self._static("#status-bar")
        if widget is None:
            return
        status = self.system_status or "Ready"
        widget.update(Text(status, style="bold #d82c0d" if self.status_is_error else ""))
