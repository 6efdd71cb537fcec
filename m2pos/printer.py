"""Thermal receipt printing over USB ESC/POS."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from m2pos.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from m2pos.models import Order
from m2pos.receipt import ReceiptLine, build_receipt

logger = logging.getLogger(__name__)

# Separator tuning values.
_SEPARATOR_HEIGHT_PX = 14
_SEPARATOR_DASH_PX = 8
_SEPARATOR_GAP_PX = 4
_LINE_EXTRA_PX = 10
_RIGHT_GUTTER_PX = 8
_FONT_OVERRIDE_ENV = "M2POS_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)


def _font_candidates() -> list[str]:
    """Receipt font paths to try, the env override first, without repeats."""
    ordered = [os.environ.get(_FONT_OVERRIDE_ENV, "").strip(), PRINTER_FONT_PATH, *_LINUX_FONT_FALLBACKS]
    return list(dict.fromkeys(path for path in ordered if path))


def resolve_printer_font_path() -> str:
    """Return the first receipt font that exists on this machine."""
    candidates = _font_candidates()
    for candidate in candidates:
        if Path(candidate).is_file():
            return candidate
    raise RuntimeError(
        f"No receipt font found; point {_FONT_OVERRIDE_ENV} at a .ttf or .otf file "
        f"(looked in {', '.join(candidates)})"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Report whether receipts can be printed, as (ready, status message) for the status bar."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Receipt printing off: {exc}")
    return (True, f"Receipt printer ready (USB {PRINTER_USB_VENDOR_ID:04x}:{PRINTER_USB_PRODUCT_ID:04x})")


def _fit_text_to_px(text: str, font: object, max_width_px: int) -> str:
    from PIL import Image, ImageDraw

    probe = Image.new("1", (1, 1), color=1)
    draw = ImageDraw.Draw(probe)
    if draw.textbbox((0, 0), text, font=font)[2] <= max_width_px:
        return text
    ellipsis = "..."
    trimmed = text
    while trimmed:
        candidate = f"{trimmed}{ellipsis}"
        if draw.textbbox((0, 0), candidate, font=font)[2] <= max_width_px:
            return candidate
        trimmed = trimmed[:-1]
    return ellipsis


def _render_line(line: ReceiptLine, font: object) -> object:
    from PIL import Image, ImageDraw

    canvas_height = PRINTER_FONT_SIZE + _LINE_EXTRA_PX
    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    usable_px = PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX - _RIGHT_GUTTER_PX

    right_width = 0
    if line.right:
        right_bbox = draw.textbbox((0, 0), line.right, font=font)
        right_width = right_bbox[2] - right_bbox[0]

    left = _fit_text_to_px(line.left, font, usable_px - right_width - (_RIGHT_GUTTER_PX if right_width else 0))
    bbox = draw.textbbox((0, 0), left or " ", font=font)
    text_width = bbox[2] - bbox[0]
    text_height = bbox[3] - bbox[1]
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]

    if line.kind == "center":
        x = max(0, (PRINTER_WIDTH_PX - text_width) // 2)
    else:
        x = PRINTER_LEFT_INDENT_PX
    draw.text((x, y), left, font=font, fill=0)

    if line.right:
        right_x = PRINTER_WIDTH_PX - _RIGHT_GUTTER_PX - right_width
        draw.text((right_x, y), line.right, font=font, fill=0)
    return img


def _render_separator() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _SEPARATOR_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    y = _SEPARATOR_HEIGHT_PX // 2
    for x in range(0, PRINTER_WIDTH_PX, _SEPARATOR_DASH_PX + _SEPARATOR_GAP_PX):
        draw.line((x, y, min(PRINTER_WIDTH_PX - 1, x + _SEPARATOR_DASH_PX), y), fill=0, width=1)
    return img


def _render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def print_receipt_lines(lines: list[ReceiptLine], printer: object | None = None) -> None:
    """Print receipt lines top to bottom and cut the ticket at the end."""
    if not lines:
        return

    try:
        from PIL import ImageFont
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    if printer is None:
        try:
            from escpos.printer import Usb
        except Exception as exc:
            raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc
        printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)

    font_path = resolve_printer_font_path()
    font = ImageFont.truetype(font_path, PRINTER_FONT_SIZE)
    total_font = ImageFont.truetype(font_path, PRINTER_FONT_SIZE + 6)

    for line in lines:
        if line.kind == "separator":
            printer.image(_render_separator())
            continue
        printer.image(_render_line(line, total_font if line.kind == "total" else font))

    printer.image(_render_spacer(PRINTER_TAIL_SPACER_PX))
    printer.cut()


def print_receipt(order: Order, printer: object | None = None) -> None:
    print_receipt_lines(build_receipt(order), printer=printer)
    logger.info("receipt_printed order_id=%s", order.id)
