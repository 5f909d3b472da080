"""Order summary breakdown modal."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from matrix_order.models import OrderSummary
from matrix_order.rendering import format_breakdown


class BreakdownModal(ModalScreen[None]):
    """Centered modal listing every priced line and the totals."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
    ]

    CSS = """
    BreakdownModal {
        align: center middle;
        background: $background 60%;
    }

    #breakdown-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #breakdown-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #breakdown-help {
        margin-top: 1;
        color: $text-muted;
    }
    """

    def __init__(self, summary: OrderSummary) -> None:
        super().__init__()
        self.summary = summary

    def compose(self) -> ComposeResult:
        with Container(id="breakdown-dialog"):
            yield Static("Order Summary", id="breakdown-title")
            yield Static(format_breakdown(self.summary), id="breakdown-body")
            yield Static("Esc / q to close", id="breakdown-help")

    def action_close(self) -> None:
        self.dismiss()
