"""Rich text rendering helpers for menu, bill and order rows."""

from __future__ import annotations

from rich.text import Text

from m2pos.csv_codec import format_order_date, format_order_time
from m2pos.data import category_label, format_price
from m2pos.models import BillItem, MenuItem, Order


def badge_style(tag: str) -> str:
    """Return a consistent badge style for category and payment tags."""
    if tag in {"momos", "cash"}:
        return "bold #ffffff on #2f8f5b"
    if tag in {"maggie", "upi"}:
        return "bold #ffffff on #6b46c1"
    if tag == "combo":
        return "bold #1f1300 on #e0a526"
    return "bold #0b1f0f on #9aa5b1"


def format_category_tag(category: str) -> Text:
    return Text(f" {category_label(category)} ", style=badge_style(category))


def format_menu_label(item: MenuItem) -> Text:
    text = Text()
    text.append(item.name)
    if item.pcs:
        text.append(f" ({item.pcs} pcs)", style="dim")
    text.append(f"  {format_price(item.price)}", style="bold")
    styles = [style for style in item.cooking_styles if style]
    if styles:
        text.append(f"  {'/'.join(styles)}", style="italic")
    if item.is_jain:
        text.append(" ")
        text.append(" JAIN ", style="bold #ffffff on #b23a48")
    return text


def format_bill_line(item: BillItem) -> Text:
    text = Text()
    text.append(item.menu_item.name)
    if item.cooking_style:
        text.append(f" ({item.cooking_style})", style="italic")
    text.append(f" x{item.quantity}", style="bold")
    text.append(f"  {format_price(item.line_total)}")
    return text


def format_payment_tag(method: str) -> Text:
    return Text(f" {method.upper()} ", style=badge_style(method))


def format_order_row(order: Order) -> Text:
    text = Text()
    text.append(order.id, style="bold")
    text.append(f"  {format_order_date(order.timestamp)} {format_order_time(order.timestamp)}  ")
    text.append_text(format_payment_tag(order.payment_method))
    text.append(f"  {format_price(order.total)}", style="bold")
    if order.discount_percent:
        text.append(f" (-{order.discount_percent}%)", style="dim")
    if order.customer_name:
        text.append(f"  {order.customer_name}")
    if order.customer_phone:
        text.append(f"  {order.customer_phone}", style="dim")
    return text


def window_bounds(total: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Visible [start, end) slice of a list that keeps the selection centred."""
    if total <= 0:
        return (0, 0)

    rows = max(1, rows)
    if total <= rows:
        return (0, total)

    if selected is None:
        start = 0
    else:
        half = rows // 2
        start = selected - half
        start = max(0, start)
        start = min(start, total - rows)

    return (start, start + rows)
