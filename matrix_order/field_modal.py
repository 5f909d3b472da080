"""Single-line text entry modal for PO number, note and discount."""

from __future__ import annotations

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static


def decimal_chars(value: str, character: str) -> bool:
    """Accept digits and a single decimal point."""
    if character.isdigit():
        return True
    return character == "." and "." not in value


class FieldModal(ModalScreen[str | None]):
    """Prompt for one text value; Enter confirms, Esc cancels."""

    CSS = """
    FieldModal {
        align: center middle;
        background: $background 60%;
    }

    #field-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #field-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #field-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #field-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        title: str,
        value: str = "",
        max_length: int = 120,
        accept: Callable[[str, str], bool] | None = None,
    ) -> None:
        super().__init__()
        self.title_text = title
        self.value = value
        self.max_length = max_length
        self.accept = accept

    def compose(self) -> ComposeResult:
        with Container(id="field-dialog"):
            yield Static(self.title_text, id="field-title")
            yield Static(id="field-value")
            yield Static("Enter confirm. Backspace delete. Ctrl+U clear. Esc cancel.", id="field-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self.dismiss(self.value.strip())
            event.stop()
            return

        if event.key == "backspace":
            self.value = self.value[:-1]
            self._refresh_content()
            event.stop()
            return

        if event.key == "ctrl+u":
            self.value = ""
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if len(self.value) < self.max_length and (self.accept is None or self.accept(self.value, event.character)):
                self.value += event.character
                self._refresh_content()
            event.stop()

    def _refresh_content(self) -> None:
        self.query_one("#field-value", Static).update(f"{self.value}|")
