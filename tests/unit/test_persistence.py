"""
Unit tests for the SQLite key-value store and the storage adapter.
"""

import json
from datetime import datetime, timezone

from m2pos.data import default_menu
from m2pos.models import BillItem, Order
from m2pos.persistence import KeyValueStore, PosStorage, order_from_dict, order_to_dict
from m2pos.pos_state import PosState


def make_order(menu):
    return Order(
        id='M2-2026-2024',
        items=[BillItem(id='paneer-momos-Fried-1', menu_item=menu['paneer-momos'], cooking_style='Fried', quantity=2)],
        subtotal=240,
        discount_percent=10,
        discount_amount=24,
        total=216,
        payment_method='upi',
        timestamp=datetime(2026, 10, 17, 8, 30, tzinfo=timezone.utc),
        customer_name='Asha',
        customer_phone='9876543210',
    )


class TestKeyValueStore:
    """Tests for the raw slot table."""

    def test_set_get_delete(self, tmp_path):
        store = KeyValueStore(tmp_path / 'nested' / 'kv.db')
        store.bootstrap_schema()

        assert store.get('slot') is None
        store.set('slot', 'one')
        store.set('slot', 'two')
        assert store.get('slot') == 'two'
        store.delete('slot')
        assert store.get('slot') is None

    def test_bootstrap_is_idempotent(self, tmp_path):
        store = KeyValueStore(tmp_path / 'kv.db')
        store.bootstrap_schema()
        store.set('slot', 'kept')

        store.bootstrap_schema()

        assert store.get('slot') == 'kept'


class TestOrderSerialization:
    """Tests for the JSON shape of stored orders."""

    def test_round_trip(self, menu):
        order = make_order(menu)

        restored = order_from_dict(json.loads(json.dumps(order_to_dict(order))))

        assert restored == order
        assert restored.items[0].menu_item == menu['paneer-momos']

    def test_naive_timestamp_becomes_aware(self, menu):
        raw = order_to_dict(make_order(menu))
        raw['timestamp'] = '2026-10-17T08:30:00'

        restored = order_from_dict(raw)

        assert restored.timestamp.tzinfo is not None

    def test_missing_optional_fields_take_defaults(self, menu):
        raw = order_to_dict(make_order(menu))
        for key in ('discount_percent', 'discount_amount', 'customer_name', 'customer_phone'):
            del raw[key]

        restored = order_from_dict(raw)

        assert restored.discount_percent == 0
        assert restored.discount_amount == 0
        assert restored.customer_name == ''
        assert restored.customer_phone == ''


class TestPosStorage:
    """Tests for best-effort loading and saving."""

    def test_nothing_saved_loads_none(self, storage):
        assert storage.load_orders() is None
        assert storage.load_menu() is None

    def test_orders_round_trip(self, storage, menu):
        order = make_order(menu)

        assert storage.save_orders([order]) is True
        assert storage.load_orders() == [order]

    def test_menu_round_trip(self, storage):
        assert storage.save_menu(default_menu()) is True
        assert storage.load_menu() == default_menu()

    def test_empty_ledger_is_saved_as_empty_list(self, storage):
        storage.save_orders([])

        assert storage.load_orders() == []

    def test_corrupt_orders_load_none(self, storage, caplog):
        storage.store.set(storage.orders_key, '{not json')

        assert storage.load_orders() is None
        assert 'Error loading orders from storage' in caplog.text

    def test_malformed_menu_loads_none(self, storage):
        storage.store.set(storage.menu_key, json.dumps([{'name': 'no id'}]))

        assert storage.load_menu() is None

    def test_clear_orders_removes_slot(self, storage, menu):
        storage.save_orders([make_order(menu)])
        storage.save_menu(default_menu())

        assert storage.clear_orders() is True
        assert storage.load_orders() is None
        assert storage.load_menu() == default_menu()

    def test_unusable_database_fails_silently(self, tmp_path, clock, menu, caplog):
        """A store that cannot open leaves the session working in memory."""
        storage = PosStorage(KeyValueStore(tmp_path))
        state = PosState(storage=storage, clock=clock)

        state.add_to_bill(menu['cold-drink'], None)
        order = state.process_payment('cash')

        assert state.orders == [order]
        assert storage.save_orders(state.orders) is False
        assert storage.load_orders() is None
        assert 'Error saving orders to storage' in caplog.text
