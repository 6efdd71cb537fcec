"""Order history screen: search, payment filter, discounts, reprint and export."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Header, Static

from m2pos.csv_codec import dated_filename, export_orders_to_csv, write_csv_file
from m2pos.models import Order
from m2pos.pos_state import PosState
from m2pos.prompt_modal import PromptModal
from m2pos.rendering import format_bill_line, format_order_row, window_bounds
from m2pos.summary import PAYMENT_FILTERS, filter_orders

logger = logging.getLogger(__name__)


def discount_input_error(value: str) -> str | None:
    if not value:
        return "Discount is required."
    if not value.isdigit() or int(value) > 100:
        return "Discount must be between 0 and 100."
    return None


class HistoryScreen(Screen[None]):
    """Browse past orders, most recent first."""

    CSS = """
    #history-pane {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #history-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #history-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #history-help {
        color: $text-muted;
        margin-top: 1;
    }
    """

    def __init__(self, state: PosState, on_print: Callable[[Order], str], export_dir: str | Path) -> None:
        super().__init__()
        self.state = state
        self.on_print = on_print
        self.export_dir = export_dir
        self.input_state = "normal"
        self.search = ""
        self.method = "all"
        self.selected_index: int | None = None
        self.status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="history-pane"):
            yield Static(id="history-bar")
            yield Static(id="history-list")
            yield Static(
                "/ search, F filter, J/K move, D discount, P reprint, E export CSV, Esc back",
                id="history-help",
            )

    def on_mount(self) -> None:
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if self.input_state == "search":
            self._handle_search_key(event)
            event.stop()
            return

        handled = True
        if event.key in {"escape", "q"}:
            self.dismiss()
        elif event.character == "/":
            self.input_state = "search"
        elif event.key == "f":
            position = PAYMENT_FILTERS.index(self.method)
            self.method = PAYMENT_FILTERS[(position + 1) % len(PAYMENT_FILTERS)]
            self.selected_index = None
        elif event.key in {"j", "down"}:
            self._move_selection(1)
        elif event.key in {"k", "up"}:
            self._move_selection(-1)
        elif event.key == "d":
            self._prompt_discount()
        elif event.key == "p":
            self._reprint_selected()
        elif event.key == "e":
            self._export_orders()
        else:
            handled = False

        if handled:
            self._refresh_all()
            event.stop()

    def _handle_search_key(self, event: Key) -> None:
        if event.key in {"escape", "enter"}:
            self.input_state = "normal"
        elif event.key == "backspace":
            self.search = self.search[:-1]
        elif event.is_printable and event.character:
            self.search += event.character
        self.selected_index = None
        self._refresh_all()

    def _visible_orders(self) -> list[Order]:
        return filter_orders(self.state.orders, self.search, self.method)

    def _selected_order(self) -> Order | None:
        orders = self._visible_orders()
        if self.selected_index is None or not (0 <= self.selected_index < len(orders)):
            return None
        return orders[self.selected_index]

    def _move_selection(self, delta: int) -> None:
        orders = self._visible_orders()
        if not orders:
            self.selected_index = None
            return
        if self.selected_index is None:
            self.selected_index = 0 if delta > 0 else len(orders) - 1
        else:
            self.selected_index = (self.selected_index + delta) % len(orders)

    def _prompt_discount(self) -> None:
        order = self._selected_order()
        if order is None:
            self.status = "Select an order first (J/K)"
            return

        def apply(value: str | None) -> None:
            if value is None:
                return
            updated = self.state.apply_discount_to_order(order.id, int(value))
            if updated is not None:
                self.status = f"{updated.id}: {updated.discount_percent}% off, total ₹{updated.total}"
            self._refresh_all()

        self.app.push_screen(
            PromptModal(
                "Apply Discount",
                f"Discount % for {order.id} (0-100)",
                initial=str(order.discount_percent),
                digits_only=True,
                max_length=3,
                validator=discount_input_error,
            ),
            apply,
        )

    def _reprint_selected(self) -> None:
        order = self._selected_order()
        if order is None:
            self.status = "Select an order first (J/K)"
            return
        self.status = self.on_print(order)

    def _export_orders(self) -> None:
        if not self.state.orders:
            self.status = "No orders to export"
            return
        try:
            path = write_csv_file(
                export_orders_to_csv(self.state.orders),
                dated_filename("m2-orders", date.today()),
                self.export_dir,
            )
        except OSError as exc:
            logger.exception("orders_export_failed")
            self.status = f"Export failed: {exc}"
            return
        self.status = f"Exported {len(self.state.orders)} orders to {path}"

    def _refresh_all(self) -> None:
        self._refresh_bar()
        self._refresh_list()

    def _refresh_bar(self) -> None:
        count = len(self.state.orders)
        text = Text()
        text.append(f"Order History: {count} total order{'s' if count != 1 else ''}", style="bold")
        text.append(f"   filter: {self.method.upper()}")
        text.append("\nsearch: ")
        text.append(self.search)
        if self.input_state == "search":
            text.append("|", style="bold")
        if self.status:
            text.append(f"\n{self.status}", style="italic")
        self.query_one("#history-bar", Static).update(text)

    def _refresh_list(self) -> None:
        widget = self.query_one("#history-list", Static)
        orders = self._visible_orders()
        if not orders:
            self.selected_index = None
            widget.update("(no orders)")
            return

        if self.selected_index is not None and self.selected_index >= len(orders):
            self.selected_index = len(orders) - 1

        rows = widget.size.height if widget.size.height > 0 else 8
        start, end = window_bounds(len(orders), max(1, rows // 2), self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            order = orders[idx]
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_order_row(order))
            lines.append("\n      ")
            lines.append_text(Text("; ").join(format_bill_line(item) for item in order.items))
        if end < len(orders):
            lines.append("\n⋮", style="dim")
        widget.update(lines)
