"""Runtime configuration defaults for persistence, exports and printing."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("M2POS_DB_PATH", "data/m2pos.db")
EXPORT_DIR = os.environ.get("M2POS_EXPORT_DIR", "exports")
LOG_PATH = os.environ.get("M2POS_LOG_PATH", "/tmp/m2pos-debug.log")
LOG_LEVEL = os.environ.get("M2POS_LOG_LEVEL", "INFO").upper()

SHOP_NAME = "M² Maggie × Momos"

# Storage slot keys, one JSON document each.
ORDERS_STORAGE_KEY = "m2_pos_orders"
MENU_STORAGE_KEY = "m2_pos_menu"

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 24
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_TAIL_SPACER_PX = 70
