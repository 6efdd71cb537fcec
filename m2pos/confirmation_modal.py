"""Order confirmation modal with the receipt preview."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from m2pos.models import Order
from m2pos.receipt import build_receipt, receipt_text


class OrderConfirmationModal(ModalScreen[None]):
    """Shows a completed order; ``p`` sends it to the receipt printer."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("enter", "close", "Close"),
        ("q", "close", "Close"),
        ("p", "print_receipt", "Print"),
    ]

    CSS = """
    OrderConfirmationModal {
        align: center middle;
        background: $background 60%;
    }

    #confirm-dialog {
        width: 44;
        height: auto;
        border: round $success;
        background: $panel;
        padding: 1 2;
    }

    #confirm-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #confirm-receipt {
        color: white;
        margin-bottom: 1;
    }

    #confirm-status {
        color: #dddddd;
    }
    """

    def __init__(self, order: Order, on_print: Callable[[Order], str]) -> None:
        super().__init__()
        self.order = order
        self.on_print = on_print
        self.status = "P print receipt, Enter/Esc/q close"

    def compose(self) -> ComposeResult:
        with Container(id="confirm-dialog"):
            yield Static("Order Confirmed!", id="confirm-title")
            yield Static(Text(receipt_text(build_receipt(self.order))), id="confirm-receipt")
            yield Static(id="confirm-status")

    def on_mount(self) -> None:
        self._refresh_status()

    def action_close(self) -> None:
        self.dismiss()

    def action_print_receipt(self) -> None:
        self.status = self.on_print(self.order)
        self._refresh_status()

    def _refresh_status(self) -> None:
        self.query_one("#confirm-status", Static).update(Text(self.status))
