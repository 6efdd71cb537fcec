"""SQLite key-value persistence for the order ledger and the menu catalog."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from m2pos.config import DB_PATH, MENU_STORAGE_KEY, ORDERS_STORAGE_KEY
from m2pos.data import menu_item_from_dict, menu_item_to_dict
from m2pos.models import BillItem, MenuItem, Order

logger = logging.getLogger(__name__)

_STORAGE_ERRORS = (sqlite3.Error, OSError, ValueError, TypeError, KeyError, AttributeError)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class KeyValueStore:
    """Whole-value slots addressed by fixed keys, one SQLite row per slot."""

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create the slot table if it does not already exist."""
        with closing(self._connect()) as conn:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )

    def get(self, key: str) -> str | None:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        with closing(self._connect()) as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, value, _utc_now_iso()),
                )

    def delete(self, key: str) -> None:
        with closing(self._connect()) as conn:
            with conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


def bill_item_to_dict(item: BillItem) -> dict[str, object]:
    return {
        "id": item.id,
        "menu_item": menu_item_to_dict(item.menu_item),
        "cooking_style": item.cooking_style,
        "quantity": item.quantity,
    }


def bill_item_from_dict(raw: dict[str, object]) -> BillItem:
    style = raw.get("cooking_style")
    return BillItem(
        id=str(raw["id"]),
        menu_item=menu_item_from_dict(raw["menu_item"]),  # type: ignore[arg-type]
        cooking_style=str(style) if style else None,
        quantity=int(raw["quantity"]),  # type: ignore[arg-type]
    )


def order_to_dict(order: Order) -> dict[str, object]:
    return {
        "id": order.id,
        "items": [bill_item_to_dict(item) for item in order.items],
        "subtotal": order.subtotal,
        "discount_percent": order.discount_percent,
        "discount_amount": order.discount_amount,
        "total": order.total,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "payment_method": order.payment_method,
        "timestamp": order.timestamp.isoformat(),
    }


def order_from_dict(raw: dict[str, object]) -> Order:
    """Rebuild an Order, rehydrating its timestamp into an aware datetime."""
    timestamp = datetime.fromisoformat(str(raw["timestamp"]))
    if timestamp.tzinfo is None:
        timestamp = timestamp.astimezone()
    return Order(
        id=str(raw["id"]),
        items=[bill_item_from_dict(item) for item in raw.get("items", [])],  # type: ignore[union-attr]
        subtotal=int(raw["subtotal"]),  # type: ignore[arg-type]
        discount_percent=int(raw.get("discount_percent", 0)),  # type: ignore[arg-type]
        discount_amount=int(raw.get("discount_amount", 0)),  # type: ignore[arg-type]
        total=int(raw["total"]),  # type: ignore[arg-type]
        customer_name=str(raw.get("customer_name") or ""),
        customer_phone=str(raw.get("customer_phone") or ""),
        payment_method=str(raw["payment_method"]),
        timestamp=timestamp,
    )


class PosStorage:
    """
    Best-effort durable mirror of the ledger and the catalog.

    Every failure is logged and swallowed: loads report "nothing saved"
    (None) and saves report False, so in-memory state stays authoritative.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        orders_key: str = ORDERS_STORAGE_KEY,
        menu_key: str = MENU_STORAGE_KEY,
    ) -> None:
        self.store = store if store is not None else KeyValueStore()
        self.orders_key = orders_key
        self.menu_key = menu_key
        try:
            self.store.bootstrap_schema()
        except _STORAGE_ERRORS:
            logger.exception("storage_bootstrap_failed db=%s", self.store.db_path)

    def _load_json(self, key: str) -> object | None:
        raw = self.store.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def load_orders(self) -> list[Order] | None:
        try:
            payload = self._load_json(self.orders_key)
            if payload is None:
                return None
            return [order_from_dict(raw) for raw in payload]  # type: ignore[union-attr]
        except _STORAGE_ERRORS:
            logger.exception("Error loading orders from storage")
            return None

    def save_orders(self, orders: Iterable[Order]) -> bool:
        try:
            self.store.set(self.orders_key, json.dumps([order_to_dict(order) for order in orders]))
        except _STORAGE_ERRORS:
            logger.exception("Error saving orders to storage")
            return False
        return True

    def clear_orders(self) -> bool:
        try:
            self.store.delete(self.orders_key)
        except _STORAGE_ERRORS:
            logger.exception("Error removing orders from storage")
            return False
        return True

    def load_menu(self) -> list[MenuItem] | None:
        try:
            payload = self._load_json(self.menu_key)
            if payload is None:
                return None
            return [menu_item_from_dict(raw) for raw in payload]  # type: ignore[union-attr]
        except _STORAGE_ERRORS:
            logger.exception("Error loading menu from storage")
            return None

    def save_menu(self, items: Iterable[MenuItem]) -> bool:
        try:
            self.store.set(self.menu_key, json.dumps([menu_item_to_dict(item) for item in items]))
        except _STORAGE_ERRORS:
            logger.exception("Error saving menu to storage")
            return False
        return True
