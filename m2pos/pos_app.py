"""Main Textual app class."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from m2pos.config import EXPORT_DIR, SHOP_NAME
from m2pos.confirmation_modal import OrderConfirmationModal
from m2pos.constant import CATEGORY_KEYS
from m2pos.csv_codec import (
    MENU_EXPORT_FILENAME,
    MENU_TEMPLATE_FILENAME,
    export_menu_to_csv,
    generate_menu_csv_template,
    write_csv_file,
)
from m2pos.data import category_label, format_price, menu_by_category, search_menu
from m2pos.history_screen import HistoryScreen
from m2pos.models import BillItem, MenuItem, Order
from m2pos.pos_state import PosState
from m2pos.printer import check_printer_dependencies, print_receipt
from m2pos.prompt_modal import PromptModal
from m2pos.rendering import badge_style, format_bill_line, format_category_tag, format_menu_label, window_bounds
from m2pos.style_modal import StyleModal
from m2pos.summary_screen import SummaryScreen

logger = logging.getLogger(__name__)


def clear_confirmation_error(value: str) -> str | None:
    if value != "CLEAR":
        return "Type CLEAR to delete all order data."
    return None


class PosApp(App):
    """A Textual app for ringing up bills at the stall counter."""

    TITLE = "M² POS"
    SUB_TITLE = SHOP_NAME

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #menu-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #bill-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #bill-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #bill-footer {
        height: auto;
        padding: 0 1;
        margin-top: 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    category = reactive("momos")
    search_query = reactive("")
    selected_index = reactive(0)
    bill_selected_index = reactive(None)

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, state: PosState, export_dir: str | Path = EXPORT_DIR) -> None:
        super().__init__()
        self.state = state
        self.export_dir = export_dir
        self.system_status = ""
        self.state.subscribe(self._on_state_commit)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="menu-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")
            with Vertical(id="bill-pane"):
                yield Static("Current Bill", classes="pane-title")
                yield Static("(bill is empty)", id="bill-list")
                yield Static(id="bill-footer")

    def on_mount(self) -> None:
        _, msg = check_printer_dependencies()
        self.system_status = msg
        logger.debug("on_mount printer_status=%r", msg)
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        # While another screen is active, let it own keyboard handling.
        if len(self.screen_stack) > 1:
            return

        if self.input_state == "active":
            self._handle_search_key(event)
            return

        character = event.character or ""
        if character in {"+", "="}:
            self._change_selected_quantity(1)
            event.stop()
            return
        if character == "-":
            self._change_selected_quantity(-1)
            event.stop()
            return
        if character == "X":
            self._prompt_clear_all_data()
            event.stop()
            return

        if not event.is_printable or len(character) != 1 or not character.isalnum():
            return

        key = character.lower()
        handlers = {
            "j": lambda: self._move_bill_selection(1),
            "k": lambda: self._move_bill_selection(-1),
            "d": self._remove_selected_line,
            "x": self._clear_bill,
            "n": self._prompt_customer_name,
            "p": self._prompt_customer_phone,
            "c": lambda: self._checkout("cash"),
            "u": lambda: self._checkout("upi"),
            "h": self._open_history,
            "s": self._open_summary,
            "i": self._prompt_import_menu,
            "e": self._export_menu,
            "t": self._export_template,
            "r": self._reset_menu,
        }
        if key in handlers:
            handlers[key]()
            event.stop()
            return

        if key not in CATEGORY_KEYS:
            return

        self.category = CATEGORY_KEYS[key]
        self.input_state = "active"
        self.search_query = ""
        self.selected_index = 0
        self._refresh_search()
        event.stop()

    def _handle_search_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.input_state = "normal"
            self.search_query = ""
            self.selected_index = 0
            self._refresh_search()
        elif event.key == "enter":
            self._register_selected()
        elif event.key == "backspace":
            if self.search_query:
                self.search_query = self.search_query[:-1]
                self.selected_index = 0
                self._refresh_search()
        elif event.key in {"up", "down"}:
            self._cycle_results(-1 if event.key == "up" else 1)
        elif event.is_printable and event.character:
            self.search_query += event.character
            self.selected_index = 0
            self._refresh_search()
        else:
            return
        event.stop()

    def _on_state_commit(self, slot: str) -> None:
        logger.debug("state_commit slot=%s", slot)
        self._refresh_all()

    # Menu search

    def _filtered_results(self) -> list[MenuItem]:
        return search_menu(self.state.menu_items, self.category, self.search_query)

    def _cycle_results(self, delta: int) -> None:
        results = self._filtered_results()
        if not results:
            self.selected_index = 0
            self._refresh_results(results)
            return
        self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def _register_selected(self) -> None:
        results = self._filtered_results()
        if not results:
            return

        item = results[self.selected_index]
        if item.has_style_choice:
            self.push_screen(StyleModal(item), lambda style: self._add_item(item, style) if style else None)
            return
        self._add_item(item, item.default_style)

    def _add_item(self, item: MenuItem, style: str | None) -> None:
        line = self.state.add_to_bill(item, style)
        self.bill_selected_index = self.state.bill_items.index(line)
        logger.debug("bill_add line_id=%s quantity=%d", line.id, line.quantity)
        self._refresh_bill()

    # Bill

    def _selected_line(self) -> BillItem | None:
        if self.bill_selected_index is None:
            return None
        if not (0 <= self.bill_selected_index < len(self.state.bill_items)):
            return None
        return self.state.bill_items[self.bill_selected_index]

    def _move_bill_selection(self, delta: int) -> None:
        lines = self.state.bill_items
        if not lines:
            return

        if self.bill_selected_index is None:
            self.bill_selected_index = 0 if delta > 0 else len(lines) - 1
        else:
            self.bill_selected_index = (self.bill_selected_index + delta) % len(lines)
        self._refresh_bill()

    def _change_selected_quantity(self, delta: int) -> None:
        line = self._selected_line()
        if line is None:
            return
        self.state.update_quantity(line.id, line.quantity + delta)
        self._refresh_bill()

    def _remove_selected_line(self) -> None:
        line = self._selected_line()
        if line is None:
            return
        self.state.remove_from_bill(line.id)
        self._refresh_bill()

    def _clear_bill(self) -> None:
        self.state.clear_bill()
        self.bill_selected_index = None
        self._refresh_bill()

    def _prompt_customer_name(self) -> None:
        def apply(value: str | None) -> None:
            if value is not None:
                self.state.set_customer_name(value)
                self._refresh_bill()

        self.push_screen(
            PromptModal("Customer Name", "Optional customer name", initial=self.state.customer_name, max_length=60),
            apply,
        )

    def _prompt_customer_phone(self) -> None:
        def apply(value: str | None) -> None:
            if value is not None:
                self.state.set_customer_phone(value)
                self._refresh_bill()

        self.push_screen(
            PromptModal(
                "Customer Phone",
                "Optional customer phone",
                initial=self.state.customer_phone,
                digits_only=True,
                max_length=15,
            ),
            apply,
        )

    def _checkout(self, method: str) -> None:
        if not self.state.bill_items:
            self._set_status("Nothing to check out")
            return

        try:
            order = self.state.process_payment(method)
        except ValueError as exc:
            logger.warning("checkout_rejected method=%s error=%r", method, exc)
            self._set_status(f"Checkout failed: {exc}")
            return
        self.bill_selected_index = None
        self._set_status(f"Order {order.id} paid via {method.upper()}: {format_price(order.total)}")
        logger.info("checkout order_id=%s method=%s total=%d", order.id, method, order.total)
        self.push_screen(OrderConfirmationModal(order, on_print=self._print_order))

    def _print_order(self, order: Order) -> str:
        try:
            print_receipt(order)
        except Exception as exc:
            logger.warning("print_failed order_id=%s error=%r", order.id, exc)
            return f"Print failed: {exc}"
        return f"Receipt printed for {order.id}"

    # Screens and settings

    def _open_history(self) -> None:
        self.push_screen(HistoryScreen(self.state, on_print=self._print_order, export_dir=self.export_dir))

    def _open_summary(self) -> None:
        self.push_screen(SummaryScreen(self.state, export_dir=self.export_dir))

    def _prompt_import_menu(self) -> None:
        self.push_screen(PromptModal("Import Menu CSV", "Path to a menu CSV file"), self._import_menu_from_path)

    def _import_menu_from_path(self, value: str | None) -> None:
        if not value:
            return
        try:
            text = Path(value).expanduser().read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("menu_import_read_failed path=%s error=%r", value, exc)
            self._set_status(f"Could not read {value}: {exc}")
            return

        items = self.state.import_menu(text)
        if not items:
            self._set_status("No valid items found in CSV file")
            return
        self._set_status(f"Successfully imported {len(items)} menu items")

    def _write_export(self, content: str, filename: str, label: str) -> None:
        try:
            path = write_csv_file(content, filename, self.export_dir)
        except OSError as exc:
            logger.exception("export_failed filename=%s", filename)
            self._set_status(f"Export failed: {exc}")
            return
        self._set_status(f"{label} written to {path}")

    def _export_menu(self) -> None:
        self._write_export(export_menu_to_csv(self.state.menu_items), MENU_EXPORT_FILENAME, "Menu")

    def _export_template(self) -> None:
        self._write_export(generate_menu_csv_template(), MENU_TEMPLATE_FILENAME, "Template")

    def _reset_menu(self) -> None:
        self.state.reset_menu()
        self._set_status("Menu reset to default items")

    def _prompt_clear_all_data(self) -> None:
        def apply(value: str | None) -> None:
            if value is None:
                return
            self.state.clear_all_data()
            self.bill_selected_index = None
            self._set_status("All order data has been cleared")

        self.push_screen(
            PromptModal(
                "Clear All Data",
                "Deletes every order. Type CLEAR to confirm.",
                validator=clear_confirmation_error,
            ),
            apply,
        )

    # Rendering

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_all()

    def _refresh_all(self) -> None:
        self._refresh_bill()
        self._refresh_search()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _refresh_bill(self) -> None:
        try:
            bill_widget = self.query_one("#bill-list", Static)
            footer = self.query_one("#bill-footer", Static)
        except NoMatches:
            return

        lines_data = self.state.bill_items
        if not lines_data:
            self.bill_selected_index = None
            bill_widget.update("(bill is empty)")
        else:
            if self.bill_selected_index is not None and self.bill_selected_index >= len(lines_data):
                self.bill_selected_index = len(lines_data) - 1

            start, end = window_bounds(len(lines_data), self._visible_rows(bill_widget), self.bill_selected_index)
            lines = Text()
            if start > 0:
                lines.append("⋮\n", style="dim")
            for idx in range(start, end):
                if idx > start:
                    lines.append("\n")
                pointer = "➤ " if idx == self.bill_selected_index else "  "
                lines.append(pointer)
                lines.append(f"{idx + 1}. ")
                lines.append_text(format_bill_line(lines_data[idx]))
            if end < len(lines_data):
                lines.append("\n⋮", style="dim")
            bill_widget.update(lines)

        summary = Text()
        summary.append(f"Total: {format_price(self.state.bill_total())}", style="bold")
        if self.state.customer_name:
            summary.append(f"\nCustomer: {self.state.customer_name}")
        if self.state.customer_phone:
            summary.append(f"\nPhone: {self.state.customer_phone}")
        summary.append("\nJ/K select, +/- qty, D remove, X clear, N name, P phone, C cash, U UPI", style="dim")
        footer.update(summary)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        self._refresh_results(self._filtered_results() if self.input_state == "active" else [])

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            status = self.system_status or "Ready"
            bar.update(
                Text(
                    "M momos, G maggie, O combo. H history, S summary. "
                    "I import, E export, T template, R reset, Shift+X clear.\n"
                    f"{status}"
                )
            )
            return

        text = Text()
        text.append_text(format_category_tag(self.category))
        text.append(f": {self.search_query}")
        bar.update(text)

    def _refresh_results(self, results: list[MenuItem]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return

        if self.input_state == "normal":
            results_widget.update(self._menu_overview())
            return

        if not results:
            results_widget.update("No results")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        start, end = window_bounds(len(results), self._visible_rows(results_widget), self.selected_index)
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_menu_label(results[idx]))
        if end < len(results):
            lines.append("\n⋮", style="dim")
        results_widget.update(lines)

    def _menu_overview(self) -> Text:
        text = Text()
        for idx, (category, items) in enumerate(menu_by_category(self.state.menu_items).items()):
            if idx > 0:
                text.append("\n\n")
            text.append(f" {category_label(category)} ", style=badge_style(category))
            for item in items:
                text.append("\n  ")
                text.append_text(format_menu_label(item))
        return text
