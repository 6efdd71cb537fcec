"""Session state: the live bill, customer fields, the order ledger and the menu."""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable

from m2pos.constant import PAYMENT_METHODS
from m2pos.csv_codec import parse_menu_csv
from m2pos.data import default_menu
from m2pos.models import BillItem, CookingStyle, MenuItem, Order
from m2pos.persistence import PosStorage

logger = logging.getLogger(__name__)

ORDERS_SLOT = "orders"
MENU_SLOT = "menu"

_ORDER_NUMBER_MIN = 1000
_ORDER_NUMBER_MAX = 9999
_ORDER_ID_DRAWS = 50


def _local_now() -> datetime:
    return datetime.now().astimezone()


def discount_amount_for(subtotal: int, discount_percent: int) -> int:
    """round(subtotal * percent / 100) with halves rounded up."""
    return (subtotal * discount_percent + 50) // 100


def validate_discount_percent(discount_percent: int) -> int:
    if isinstance(discount_percent, bool) or not isinstance(discount_percent, int):
        raise ValueError("discount_percent must be an integer")
    if not (0 <= discount_percent <= 100):
        raise ValueError("discount_percent must be between 0 and 100")
    return discount_percent


class PosState:
    """
    Single-owner state for one cashier session.

    Every ledger or catalog mutation is committed as a whole to the attached
    storage and then announced to subscribers with the slot name
    (``"orders"`` or ``"menu"``).
    """

    def __init__(
        self,
        menu_items: Iterable[MenuItem] | None = None,
        storage: PosStorage | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.menu_items: list[MenuItem] = list(menu_items) if menu_items is not None else default_menu()
        self.bill_items: list[BillItem] = []
        self.orders: list[Order] = []
        self.customer_name = ""
        self.customer_phone = ""
        self.storage = storage
        self._clock = clock or _local_now
        self._rng = rng or random.Random()
        self._listeners: list[Callable[[str], None]] = []

    @classmethod
    def load(cls, storage: PosStorage, **kwargs) -> PosState:
        """Build a state and restore whatever the storage slots hold."""
        state = cls(storage=storage, **kwargs)
        orders = storage.load_orders()
        if orders is not None:
            state.orders = orders
        menu_items = storage.load_menu()
        if menu_items is not None:
            state.menu_items = menu_items
        logger.info("state_loaded orders=%d menu_items=%d", len(state.orders), len(state.menu_items))
        return state

    def subscribe(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def _commit(self, slot: str) -> None:
        if self.storage is not None:
            if slot == ORDERS_SLOT:
                self.storage.save_orders(self.orders)
            else:
                self.storage.save_menu(self.menu_items)
        for listener in self._listeners:
            listener(slot)

    # Bill

    def find_bill_item(self, line_id: str) -> BillItem | None:
        for item in self.bill_items:
            if item.id == line_id:
                return item
        return None

    def _new_line_id(self, menu_item_id: str, cooking_style: CookingStyle) -> str:
        millis = int(self._clock().timestamp() * 1000)
        taken = {item.id for item in self.bill_items}
        while True:
            line_id = f"{menu_item_id}-{cooking_style or 'default'}-{millis}"
            if line_id not in taken:
                return line_id
            millis += 1

    def add_to_bill(self, menu_item: MenuItem, cooking_style: CookingStyle) -> BillItem:
        """Add one unit, merging into an existing line with the same item and style."""
        for item in self.bill_items:
            if item.menu_item.id == menu_item.id and item.cooking_style == cooking_style:
                item.quantity += 1
                return item

        item = BillItem(
            id=self._new_line_id(menu_item.id, cooking_style),
            menu_item=menu_item,
            cooking_style=cooking_style,
            quantity=1,
        )
        self.bill_items.append(item)
        return item

    def update_quantity(self, line_id: str, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError("quantity must be an integer")
        if quantity <= 0:
            self.remove_from_bill(line_id)
            return
        item = self.find_bill_item(line_id)
        if item is not None:
            item.quantity = quantity

    def remove_from_bill(self, line_id: str) -> None:
        self.bill_items = [item for item in self.bill_items if item.id != line_id]

    def clear_bill(self) -> None:
        self.bill_items = []
        self.customer_name = ""
        self.customer_phone = ""

    def set_customer_name(self, name: str) -> None:
        self.customer_name = name

    def set_customer_phone(self, phone: str) -> None:
        self.customer_phone = phone

    def bill_total(self) -> int:
        return sum(item.menu_item.price * item.quantity for item in self.bill_items)

    # Ledger

    def find_order(self, order_id: str) -> Order | None:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def _new_order_id(self, year: int) -> str:
        taken = {order.id for order in self.orders}
        for _ in range(_ORDER_ID_DRAWS):
            candidate = f"M2-{year}-{self._rng.randint(_ORDER_NUMBER_MIN, _ORDER_NUMBER_MAX)}"
            if candidate not in taken:
                return candidate

        free = [
            f"M2-{year}-{number}"
            for number in range(_ORDER_NUMBER_MIN, _ORDER_NUMBER_MAX + 1)
            if f"M2-{year}-{number}" not in taken
        ]
        if free:
            return self._rng.choice(free)

        # Four-digit numbers used up for the year; continue past 9999.
        number = _ORDER_NUMBER_MAX + 1
        while f"M2-{year}-{number}" in taken:
            number += 1
        logger.warning("order_ids_widened year=%d number=%d", year, number)
        return f"M2-{year}-{number}"

    def process_payment(self, method: str, discount_percent: int = 0) -> Order:
        """Turn the current bill into an Order at the head of the ledger and empty the bill."""
        if method not in PAYMENT_METHODS:
            raise ValueError(f"Unknown payment method: {method!r}")
        validate_discount_percent(discount_percent)
        if not self.bill_items:
            raise ValueError("Cannot check out an empty bill")

        now = self._clock()
        subtotal = self.bill_total()
        discount_amount = discount_amount_for(subtotal, discount_percent)
        order = Order(
            id=self._new_order_id(now.year),
            items=[replace(item) for item in self.bill_items],
            subtotal=subtotal,
            discount_percent=discount_percent,
            discount_amount=discount_amount,
            total=subtotal - discount_amount,
            customer_name=self.customer_name,
            customer_phone=self.customer_phone,
            payment_method=method,
            timestamp=now,
        )

        self.orders.insert(0, order)
        self._commit(ORDERS_SLOT)
        self.clear_bill()
        logger.info("order_created order_id=%s total=%d method=%s", order.id, order.total, method)
        return order

    def apply_discount_to_order(self, order_id: str, discount_percent: int) -> Order | None:
        """Recompute discount and total of an existing order; unknown ids are ignored."""
        validate_discount_percent(discount_percent)
        order = self.find_order(order_id)
        if order is None:
            return None

        order.discount_percent = discount_percent
        order.discount_amount = discount_amount_for(order.subtotal, discount_percent)
        order.total = order.subtotal - order.discount_amount
        self._commit(ORDERS_SLOT)
        logger.info("order_discounted order_id=%s percent=%d total=%d", order_id, discount_percent, order.total)
        return order

    def clear_all_data(self) -> None:
        """Drop the ledger, bill and customer fields; the saved menu is kept."""
        self.clear_bill()
        self.orders = []
        if self.storage is not None:
            self.storage.clear_orders()
        for listener in self._listeners:
            listener(ORDERS_SLOT)
        logger.info("ledger_cleared")

    # Catalog

    def set_menu_items(self, items: Iterable[MenuItem]) -> None:
        self.menu_items = list(items)
        self._commit(MENU_SLOT)

    def reset_menu(self) -> None:
        self.set_menu_items(default_menu())

    def import_menu(self, text: str) -> list[MenuItem]:
        """Replace the catalog with the parsed CSV rows, unless none survived."""
        items = parse_menu_csv(text)
        if items:
            self.set_menu_items(items)
        return items
