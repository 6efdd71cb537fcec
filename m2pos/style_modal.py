"""Cooking style picker modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from m2pos.data import format_price
from m2pos.models import MenuItem


class StyleModal(ModalScreen[str | None]):
    """Centered modal to choose how an item is cooked; None means cancelled."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose_current", "Choose"),
    ]

    CSS = """
    StyleModal {
        align: center middle;
        background: $background 60%;
    }

    #style-dialog {
        width: 48;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #style-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #style-body {
        margin-bottom: 1;
        color: white;
    }

    #style-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, item: MenuItem) -> None:
        super().__init__()
        self.item = item
        self.style_options = [style for style in item.cooking_styles if style]

    def compose(self) -> ComposeResult:
        with Container(id="style-dialog"):
            yield Static("Cooking Style", id="style-title")
            yield Static(id="style-body")
            yield Static("J/K/↑/↓ move, Enter choose, Esc/q cancel", id="style-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if not self.style_options:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.style_options)
        self._refresh_content()

    def action_choose_current(self) -> None:
        if not self.style_options:
            self.dismiss(None)
            return
        self.dismiss(self.style_options[self.cursor_index])

    def _refresh_content(self) -> None:
        content = Text(style="white")
        content.append(self.item.name, style="bold")
        content.append(f"  {format_price(self.item.price)}")
        content.append("\n\n")
        for idx, style in enumerate(self.style_options):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            content.append(f"{pointer}{style}", style="bold white" if idx == self.cursor_index else "white")
        self.query_one("#style-body", Static).update(content)
