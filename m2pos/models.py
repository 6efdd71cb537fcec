"""Domain models for the stall POS."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

CookingStyle = str | None
PaymentMethod = Literal["cash", "upi"]


@dataclass(frozen=True)
class MenuItem:
    """A sellable menu item; replaced wholesale, never edited in place."""

    id: str
    name: str
    price: int
    category: str
    pcs: int | None = None
    cooking_styles: tuple[CookingStyle, ...] = (None,)
    description: str | None = None
    is_jain: bool = False

    @property
    def has_style_choice(self) -> bool:
        return len([style for style in self.cooking_styles if style]) > 1

    @property
    def default_style(self) -> CookingStyle:
        """First named style; None when the item lists none."""
        for style in self.cooking_styles:
            if style:
                return style
        return None


@dataclass
class BillItem:
    """A bill line for one (menu item, cooking style) pair."""

    id: str
    menu_item: MenuItem
    cooking_style: CookingStyle
    quantity: int = 1

    @property
    def line_total(self) -> int:
        return self.menu_item.price * self.quantity

    def describe(self) -> str:
        style = f" ({self.cooking_style})" if self.cooking_style else ""
        return f"{self.menu_item.name}{style} x{self.quantity}"


@dataclass
class Order:
    """A completed checkout. Only the discount fields change after creation."""

    id: str
    items: list[BillItem]
    subtotal: int
    discount_percent: int
    discount_amount: int
    total: int
    payment_method: PaymentMethod
    timestamp: datetime
    customer_name: str = ""
    customer_phone: str = ""
