"""CSV interchange for the menu catalog, the order ledger and daily sales."""

from __future__ import annotations

import csv
import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Iterable

from m2pos.config import EXPORT_DIR
from m2pos.constant import COOKING_STYLES
from m2pos.models import CookingStyle, MenuItem, Order

logger = logging.getLogger(__name__)

MENU_CSV_HEADERS = ["id", "name", "price", "category", "pcs", "cookingStyle", "description", "isJain"]
ORDERS_CSV_HEADERS = [
    "Order ID",
    "Date",
    "Time",
    "Items",
    "Total",
    "Payment Method",
    "Customer Name",
    "Customer Phone",
]
SUMMARY_CSV_HEADERS = [
    "Date",
    "Total Orders",
    "Cash Orders",
    "UPI Orders",
    "Cash Amount",
    "UPI Amount",
    "Total Sales",
]

MENU_EXPORT_FILENAME = "m2-menu.csv"
MENU_TEMPLATE_FILENAME = "m2-menu-template.csv"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_NEEDS_QUOTES = re.compile(r'[,"\r\n]')


def _parse_int(value: str) -> int | None:
    """Parse leading digits the way a lenient integer field reader would."""
    match = _LEADING_INT.match(value)
    if match is None:
        return None
    return int(match.group(1))


def _quoted(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _cell(value: str) -> str:
    if _NEEDS_QUOTES.search(value):
        return _quoted(value)
    return value


def _split_line(line: str) -> list[str]:
    # One record per physical line; an unterminated quote runs to the end of the line.
    return next(csv.reader([line]), [])


def parse_cooking_styles(value: str) -> tuple[CookingStyle, ...]:
    """Pipe-separated styles; anything but a known style collapses to the no-style tag."""
    value = value.strip()
    if not value or value.lower() == "null":
        return (None,)

    styles: list[CookingStyle] = []
    for part in value.split("|"):
        token = part.strip()
        style = token if token in COOKING_STYLES else None
        if style not in styles:
            styles.append(style)
    return tuple(styles)


def parse_menu_csv(text: str) -> list[MenuItem]:
    """
    Parse menu rows, matching columns by header name (case-insensitive).

    Rows with fewer cells than the header, unreadable rows and rows without a
    positive price are dropped with a logged warning. Fewer than two lines
    means no items.
    """
    lines = text.strip().splitlines()
    if len(lines) < 2:
        return []

    headers = [header.strip().lower() for header in _split_line(lines[0])]
    items: list[MenuItem] = []

    for index, line in enumerate(lines[1:], start=1):
        try:
            values = _split_line(line)
        except csv.Error as exc:
            logger.warning("menu_csv_row_skipped line=%d reason=%s", index, exc)
            continue
        if not values:
            continue
        if len(values) < len(headers):
            logger.warning("menu_csv_row_skipped line=%d reason=short_row cells=%d", index, len(values))
            continue

        record: dict[str, str] = {}
        for header, value in zip(headers, values):
            record.setdefault(header, value.strip())

        pcs = _parse_int(record.get("pcs", ""))
        item = MenuItem(
            id=record.get("id") or f"item-{index}",
            name=record.get("name") or "Unknown Item",
            price=_parse_int(record.get("price", "")) or 0,
            category=record.get("category") or "momos",
            pcs=pcs if pcs is not None and pcs > 0 else None,
            cooking_styles=parse_cooking_styles(record.get("cookingstyle", "")),
            description=record.get("description") or None,
            is_jain=record.get("isjain", "").lower() == "true",
        )

        if not item.name or item.price <= 0:
            logger.warning("menu_csv_row_skipped line=%d reason=invalid_price_or_name id=%s", index, item.id)
            continue
        items.append(item)

    return items


def generate_menu_csv_template() -> str:
    return (
        ",".join(MENU_CSV_HEADERS)
        + "\n"
        + "example-item,Example Momos,100,momos,8,Steam|Fried,Delicious momos,false\n"
    )


def export_menu_to_csv(items: Iterable[MenuItem]) -> str:
    rows = [",".join(MENU_CSV_HEADERS)]
    for item in items:
        rows.append(
            ",".join(
                [
                    _cell(item.id),
                    _quoted(item.name),
                    str(item.price),
                    _cell(item.category),
                    str(item.pcs) if item.pcs is not None else "",
                    "|".join(style for style in item.cooking_styles if style),
                    _quoted(item.description) if item.description else "",
                    "true" if item.is_jain else "false",
                ]
            )
        )
    return "\n".join(rows)


def format_order_date(timestamp: datetime) -> str:
    """Local calendar date as dd/mm/yyyy."""
    return timestamp.astimezone().strftime("%d/%m/%Y")


def format_order_time(timestamp: datetime) -> str:
    """Local 12-hour clock time, e.g. ``02:05 pm``."""
    return timestamp.astimezone().strftime("%I:%M %p").lower()


def export_orders_to_csv(orders: Iterable[Order]) -> str:
    rows = [",".join(ORDERS_CSV_HEADERS)]
    for order in orders:
        items_text = "; ".join(item.describe() for item in order.items)
        rows.append(
            ",".join(
                [
                    _cell(order.id),
                    format_order_date(order.timestamp),
                    format_order_time(order.timestamp),
                    _quoted(items_text),
                    str(order.total),
                    order.payment_method.upper(),
                    _cell(order.customer_name or ""),
                    _cell(order.customer_phone or ""),
                ]
            )
        )
    return "\n".join(rows)


def generate_daily_summary_csv(orders: Iterable[Order]) -> str:
    """One row per local date, in first-seen order of the given orders."""
    orders_by_date: dict[str, list[Order]] = {}
    for order in orders:
        orders_by_date.setdefault(format_order_date(order.timestamp), []).append(order)

    rows = [",".join(SUMMARY_CSV_HEADERS)]
    for day, day_orders in orders_by_date.items():
        cash_orders = [order for order in day_orders if order.payment_method == "cash"]
        upi_orders = [order for order in day_orders if order.payment_method == "upi"]
        cash_total = sum(order.total for order in cash_orders)
        upi_total = sum(order.total for order in upi_orders)
        rows.append(
            ",".join(
                [
                    day,
                    str(len(day_orders)),
                    str(len(cash_orders)),
                    str(len(upi_orders)),
                    str(cash_total),
                    str(upi_total),
                    str(cash_total + upi_total),
                ]
            )
        )
    return "\n".join(rows)


def dated_filename(prefix: str, day: date) -> str:
    return f"{prefix}-{day.isoformat()}.csv"


def write_csv_file(content: str, filename: str, directory: str | Path = EXPORT_DIR) -> Path:
    """Write an export into the export directory and return its path."""
    export_dir = Path(directory)
    export_dir.mkdir(parents=True, exist_ok=True)
    path = export_dir / filename
    path.write_text(content, encoding="utf-8")
    logger.info("csv_written path=%s bytes=%d", path, len(content.encode("utf-8")))
    return path
