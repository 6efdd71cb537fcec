"""
Unit tests for receipt layout.
"""

from datetime import datetime

from m2pos.models import BillItem, Order
from m2pos.receipt import SEPARATOR, ReceiptLine, build_receipt, receipt_text


def make_order(menu, discount_percent=0, discount_amount=0, name='', phone=''):
    return Order(
        id='M2-2026-4321',
        items=[
            BillItem('a', menu['masala-magic'], 'Fried', 2),
            BillItem('b', menu['cold-drink'], None, 1),
        ],
        subtotal=227,
        discount_percent=discount_percent,
        discount_amount=discount_amount,
        total=227 - discount_amount,
        payment_method='cash',
        timestamp=datetime(2026, 10, 17, 14, 5).astimezone(),
        customer_name=name,
        customer_phone=phone,
    )


class TestBuildReceipt:
    """Tests for the receipt line sequence."""

    def test_header_and_items(self, menu):
        lines = build_receipt(make_order(menu), shop_name='Test Stall')

        assert lines[:4] == [
            ReceiptLine('Test Stall', kind='center'),
            ReceiptLine('Order #M2-2026-4321', kind='center'),
            ReceiptLine('17 Oct 2026 at 02:05 pm', kind='center'),
            SEPARATOR,
        ]
        assert lines[4] == ReceiptLine('Masala Magic Momos (Fried) x 2', '₹198')
        assert lines[5] == ReceiptLine('Cold Drink x 1', '₹29')

    def test_no_discount_lines_without_discount(self, menu):
        lines = build_receipt(make_order(menu))

        assert not any(line.left.startswith(('Subtotal', 'Discount')) for line in lines)
        assert ReceiptLine('TOTAL', '₹227', kind='total') in lines

    def test_discount_lines(self, menu):
        lines = build_receipt(make_order(menu, discount_percent=10, discount_amount=23))

        assert ReceiptLine('Subtotal', '₹227') in lines
        assert ReceiptLine('Discount (10%)', '-₹23') in lines
        assert ReceiptLine('TOTAL', '₹204', kind='total') in lines

    def test_payment_and_customer(self, menu):
        lines = build_receipt(make_order(menu, name='Asha', phone='9876543210'))
        texts = [line.left for line in lines]

        assert 'Payment: CASH' in texts
        assert 'Customer: Asha' in texts
        assert 'Phone: 9876543210' in texts
        assert texts[-2:] == ['Thank you for your order!', 'Visit us again']

    def test_customer_lines_omitted_when_blank(self, menu):
        texts = [line.left for line in build_receipt(make_order(menu))]

        assert not any(text.startswith(('Customer:', 'Phone:')) for text in texts)


class TestReceiptText:
    """Tests for the plain-text rendering."""

    def test_columns_and_separator(self):
        text = receipt_text(
            [ReceiptLine('Shop', kind='center'), SEPARATOR, ReceiptLine('Tea x 1', '₹15')],
            width=20,
        )

        assert text.split('\n') == [
            '        Shop',
            '-' * 20,
            'Tea x 1' + ' ' * 10 + '₹15',
        ]

    def test_long_left_text_keeps_a_gap(self):
        text = receipt_text([ReceiptLine('A very long item name x 1', '₹120')], width=10)

        assert text == 'A very long item name x 1 ₹120'
