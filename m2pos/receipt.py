"""Receipt layout shared by the confirmation screen and the thermal printer."""

from __future__ import annotations

from dataclasses import dataclass

from m2pos.config import SHOP_NAME
from m2pos.data import format_price
from m2pos.models import Order

RECEIPT_TEXT_WIDTH = 34


@dataclass(frozen=True)
class ReceiptLine:
    """One printed row: ``kind`` is text, center, total or separator."""

    left: str = ""
    right: str = ""
    kind: str = "text"


SEPARATOR = ReceiptLine(kind="separator")


def format_receipt_date(order: Order) -> str:
    return order.timestamp.astimezone().strftime("%d %b %Y")


def format_receipt_time(order: Order) -> str:
    return order.timestamp.astimezone().strftime("%I:%M %p").lower()


def build_receipt(order: Order, shop_name: str = SHOP_NAME) -> list[ReceiptLine]:
    lines = [
        ReceiptLine(shop_name, kind="center"),
        ReceiptLine(f"Order #{order.id}", kind="center"),
        ReceiptLine(f"{format_receipt_date(order)} at {format_receipt_time(order)}", kind="center"),
        SEPARATOR,
    ]

    for item in order.items:
        style = f" ({item.cooking_style})" if item.cooking_style else ""
        lines.append(ReceiptLine(f"{item.menu_item.name}{style} x {item.quantity}", format_price(item.line_total)))

    lines.append(SEPARATOR)
    if order.discount_amount:
        lines.append(ReceiptLine("Subtotal", format_price(order.subtotal)))
        lines.append(ReceiptLine(f"Discount ({order.discount_percent}%)", f"-{format_price(order.discount_amount)}"))
    lines.append(ReceiptLine("TOTAL", format_price(order.total), kind="total"))
    lines.append(ReceiptLine(f"Payment: {order.payment_method.upper()}"))
    if order.customer_name:
        lines.append(ReceiptLine(f"Customer: {order.customer_name}"))
    if order.customer_phone:
        lines.append(ReceiptLine(f"Phone: {order.customer_phone}"))

    lines.append(ReceiptLine())
    lines.append(ReceiptLine("Thank you for your order!", kind="center"))
    lines.append(ReceiptLine("Visit us again", kind="center"))
    return lines


def receipt_text(lines: list[ReceiptLine], width: int = RECEIPT_TEXT_WIDTH) -> str:
    """Render receipt lines as fixed-width plain text."""
    rendered: list[str] = []
    for line in lines:
        if line.kind == "separator":
            rendered.append("-" * width)
        elif line.kind == "center":
            rendered.append(line.left.center(width).rstrip())
        elif line.right:
            gap = max(1, width - len(line.left) - len(line.right))
            rendered.append(f"{line.left}{' ' * gap}{line.right}")
        else:
            rendered.append(line.left)
    return "\n".join(rendered)
