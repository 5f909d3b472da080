"""Search-and-pick modal used for products and customers."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from matrix_order.errors import MatrixOrderError

PickerRow = tuple[str, str, str]
"""(value returned on pick, label, detail line)."""


class PickerModal(ModalScreen[str | None]):
    """Type to search, ↑/↓ to move, Enter to pick, Esc to cancel."""

    CSS = """
    PickerModal {
        align: center middle;
        background: $background 60%;
    }

    #picker-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #picker-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #picker-query {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #picker-results {
        color: white;
        margin-bottom: 1;
    }

    #picker-help {
        color: #dddddd;
    }
    """

    def __init__(self, title: str, search: Callable[[str], list[PickerRow]], min_chars: int = 0) -> None:
        super().__init__()
        self.title_text = title
        self.search = search
        self.min_chars = min_chars
        self.query_text = ""
        self.results: list[PickerRow] = []
        self.cursor_index = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="picker-dialog"):
            yield Static(self.title_text, id="picker-title")
            yield Static(id="picker-query")
            yield Static(id="picker-results")
            yield Static("Type to search. ↑/↓ move. Enter pick. Esc/Ctrl+C cancel.", id="picker-help")

    def on_mount(self) -> None:
        self._run_search()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            if self.results:
                self.dismiss(self.results[self.cursor_index][0])
            event.stop()
            return

        if event.key in {"up", "down"}:
            if self.results:
                delta = -1 if event.key == "up" else 1
                self.cursor_index = (self.cursor_index + delta) % len(self.results)
                self._refresh_content()
            event.stop()
            return

        if event.key == "backspace":
            if self.query_text:
                self.query_text = self.query_text[:-1]
                self._run_search()
            event.stop()
            return

        if event.is_printable and event.character:
            self.query_text += event.character
            self._run_search()
            event.stop()

    def _run_search(self) -> None:
        self.cursor_index = 0
        self.error = ""
        if len(self.query_text) < self.min_chars:
            self.results = []
            self._refresh_content()
            return
        try:
            self.results = self.search(self.query_text)
        except MatrixOrderError as exc:
            self.results = []
            self.error = str(exc)
        self._refresh_content()

    def _refresh_content(self) -> None:
        self.query_one("#picker-query", Static).update(f"Search: {self.query_text}|")

        body = Text(style="white")
        if self.error:
            body.append(self.error, style="#ffb3b3")
        elif len(self.query_text) < self.min_chars:
            body.append(f"Type at least {self.min_chars} characters", style="#dddddd")
        elif not self.results:
            body.append("No results", style="#dddddd")
        else:
            for idx, (_, label, detail) in enumerate(self.results):
                if idx > 0:
                    body.append("\n")
                pointer = "➤ " if idx == self.cursor_index else "  "
                body.append(f"{pointer}{label}", style="bold white" if idx == self.cursor_index else "white")
                if detail:
                    body.append(f"  {detail}", style="#aaaaaa")
        self.query_one("#picker-results", Static).update(body)
