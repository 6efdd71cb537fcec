"""Order history filtering and sales statistics."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from m2pos.models import Order

PAYMENT_FILTERS: tuple[str, ...] = ("all", "cash", "upi")


@dataclass(frozen=True)
class BestSeller:
    menu_item_id: str
    name: str
    count: int


@dataclass(frozen=True)
class SalesSummary:
    total_orders: int
    cash_orders: int
    upi_orders: int
    cash_total: int
    upi_total: int
    grand_total: int
    best_seller: BestSeller | None
    today_orders: int
    today_total: int
    average_order_value: int


def filter_orders(orders: Iterable[Order], search: str = "", method: str = "all") -> list[Order]:
    """Match id or customer name case-insensitively, or phone verbatim; then filter by payment."""
    if method not in PAYMENT_FILTERS:
        raise ValueError(f"Unknown payment filter: {method!r}")

    needle = search.lower()
    matches: list[Order] = []
    for order in orders:
        found = (
            needle in order.id.lower()
            or needle in (order.customer_name or "").lower()
            or search in (order.customer_phone or "")
        )
        if found and (method == "all" or order.payment_method == method):
            matches.append(order)
    return matches


def best_seller(orders: Iterable[Order]) -> BestSeller | None:
    """Most units sold per menu item id; the first item seen wins a tie."""
    counts: dict[str, list] = {}
    for order in orders:
        for item in order.items:
            entry = counts.setdefault(item.menu_item.id, [item.menu_item.name, 0])
            entry[1] += item.quantity

    best: BestSeller | None = None
    for menu_item_id, (name, count) in counts.items():
        if best is None or count > best.count:
            best = BestSeller(menu_item_id=menu_item_id, name=name, count=count)
    return best


def summarize_sales(orders: Iterable[Order], today: date) -> SalesSummary:
    orders = list(orders)
    cash = [order for order in orders if order.payment_method == "cash"]
    upi = [order for order in orders if order.payment_method == "upi"]
    cash_total = sum(order.total for order in cash)
    upi_total = sum(order.total for order in upi)
    grand_total = cash_total + upi_total
    todays = [order for order in orders if order.timestamp.astimezone().date() == today]
    average = (grand_total * 2 + len(orders)) // (2 * len(orders)) if orders else 0

    return SalesSummary(
        total_orders=len(orders),
        cash_orders=len(cash),
        upi_orders=len(upi),
        cash_total=cash_total,
        upi_total=upi_total,
        grand_total=grand_total,
        best_seller=best_seller(orders),
        today_orders=len(todays),
        today_total=sum(order.total for order in todays),
        average_order_value=average,
    )
