"""Sales summary screen with daily summary export."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Header, Static

from m2pos.csv_codec import dated_filename, generate_daily_summary_csv, write_csv_file
from m2pos.data import format_price
from m2pos.pos_state import PosState
from m2pos.summary import summarize_sales

logger = logging.getLogger(__name__)


class SummaryScreen(Screen[None]):
    """Complete overview of sales performance."""

    CSS = """
    #summary-pane {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #summary-body {
        height: 1fr;
    }

    #summary-status {
        color: $text-muted;
        margin-top: 1;
    }
    """

    def __init__(self, state: PosState, export_dir: str | Path) -> None:
        super().__init__()
        self.state = state
        self.export_dir = export_dir
        self.status = "E export daily summary CSV, Esc back"

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="summary-pane"):
            yield Static(id="summary-body")
            yield Static(id="summary-status")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "q"}:
            self.dismiss()
            event.stop()
            return
        if event.key == "e":
            self._export_summary()
            self._refresh_content()
            event.stop()

    def _export_summary(self) -> None:
        if not self.state.orders:
            self.status = "No orders to summarize"
            return
        try:
            path = write_csv_file(
                generate_daily_summary_csv(self.state.orders),
                dated_filename("m2-summary", date.today()),
                self.export_dir,
            )
        except OSError as exc:
            logger.exception("summary_export_failed")
            self.status = f"Export failed: {exc}"
            return
        self.status = f"Exported summary to {path}"

    def _refresh_content(self) -> None:
        stats = summarize_sales(self.state.orders, date.today())

        table = Table(title="Sales Summary", show_header=False, expand=True)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Grand Total Sales", f"{format_price(stats.grand_total)} ({stats.total_orders} orders)")
        table.add_row("Today's Sales", f"{format_price(stats.today_total)} ({stats.today_orders} orders today)")
        if stats.best_seller is not None:
            table.add_row("Best Seller", f"{stats.best_seller.name} ({stats.best_seller.count} sold)")
        else:
            table.add_row("Best Seller", "No data")
        table.add_row("Cash Payments", f"{format_price(stats.cash_total)} ({stats.cash_orders} orders)")
        table.add_row("UPI Payments", f"{format_price(stats.upi_total)} ({stats.upi_orders} orders)")
        table.add_row("Avg Order Value", format_price(stats.average_order_value))

        self.query_one("#summary-body", Static).update(table)
        self.query_one("#summary-status", Static).update(Text(self.status))
