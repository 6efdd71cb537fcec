"""
Unit tests for thermal receipt printing with a fake printer.
"""

from datetime import datetime

import pytest

from m2pos import printer
from m2pos.models import BillItem, Order


class FakePrinter:
    """Collects what would be sent to the ESC/POS device."""

    def __init__(self):
        self.images = []
        self.cut_count = 0

    def image(self, img):
        self.images.append(img)

    def cut(self):
        self.cut_count += 1


class TestFontResolution:
    """Tests for picking a printer font."""

    def test_env_override_wins(self, tmp_path, monkeypatch):
        font = tmp_path / 'receipt.ttf'
        font.write_bytes(b'')
        monkeypatch.setenv('M2POS_PRINTER_FONT_PATH', str(font))

        assert printer.resolve_printer_font_path() == str(font)

    def test_candidates_skip_blanks_and_repeats(self, monkeypatch):
        monkeypatch.setenv('M2POS_PRINTER_FONT_PATH', '  ')
        monkeypatch.setattr(printer, 'PRINTER_FONT_PATH', '/fonts/a.ttf')
        monkeypatch.setattr(printer, '_LINUX_FONT_FALLBACKS', ('/fonts/a.ttf', '/fonts/b.ttf'))

        assert printer._font_candidates() == ['/fonts/a.ttf', '/fonts/b.ttf']

    def test_no_font_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv('M2POS_PRINTER_FONT_PATH', str(tmp_path / 'missing.ttf'))
        monkeypatch.setattr(printer, 'PRINTER_FONT_PATH', str(tmp_path / 'also-missing.ttf'))
        monkeypatch.setattr(printer, '_LINUX_FONT_FALLBACKS', ())

        with pytest.raises(RuntimeError, match='M2POS_PRINTER_FONT_PATH'):
            printer.resolve_printer_font_path()

    def test_dependency_check_reports_missing_font(self, tmp_path, monkeypatch):
        monkeypatch.setenv('M2POS_PRINTER_FONT_PATH', str(tmp_path / 'missing.ttf'))
        monkeypatch.setattr(printer, 'PRINTER_FONT_PATH', str(tmp_path / 'also-missing.ttf'))
        monkeypatch.setattr(printer, '_LINUX_FONT_FALLBACKS', ())

        ready, message = printer.check_printer_dependencies()

        assert ready is False
        assert message.startswith('Receipt printing off')


class TestPrintReceipt:
    """Tests for the rendered ticket."""

    def test_empty_receipt_prints_nothing(self):
        fake = FakePrinter()

        printer.print_receipt_lines([], printer=fake)

        assert fake.images == []
        assert fake.cut_count == 0

    def test_print_receipt_renders_each_line_and_cuts(self, menu):
        pytest.importorskip('PIL')
        try:
            printer.resolve_printer_font_path()
        except RuntimeError:
            pytest.skip('no TrueType font available')

        order = Order(
            id='M2-2026-4321',
            items=[BillItem('a', menu['trio-steam'], 'Steam', 2)],
            subtotal=100,
            discount_percent=0,
            discount_amount=0,
            total=100,
            payment_method='cash',
            timestamp=datetime(2026, 10, 17, 14, 5).astimezone(),
        )
        fake = FakePrinter()

        printer.print_receipt(order, printer=fake)

        lines = printer.build_receipt(order)
        assert len(fake.images) == len(lines) + 1
        assert all(img.width == printer.PRINTER_WIDTH_PX for img in fake.images)
        assert fake.cut_count == 1
