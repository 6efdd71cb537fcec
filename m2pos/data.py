"""Seed menu data and menu presentation helpers."""

from __future__ import annotations

from typing import Iterable

from m2pos.constant import CATEGORY_LABELS, DEFAULT_MENU_ITEMS
from m2pos.models import MenuItem


def menu_item_from_dict(raw: dict[str, object]) -> MenuItem:
    """Build a MenuItem from a raw mapping (seed data or a stored JSON document)."""
    styles = raw.get("cooking_styles") or [None]
    pcs = raw.get("pcs")
    description = raw.get("description")
    return MenuItem(
        id=str(raw["id"]),
        name=str(raw["name"]),
        price=int(raw["price"]),  # type: ignore[arg-type]
        category=str(raw.get("category") or "momos"),
        pcs=int(pcs) if pcs is not None else None,  # type: ignore[arg-type]
        cooking_styles=tuple(str(style) if style else None for style in styles),  # type: ignore[union-attr]
        description=str(description) if description else None,
        is_jain=bool(raw.get("is_jain", False)),
    )


def menu_item_to_dict(item: MenuItem) -> dict[str, object]:
    return {
        "id": item.id,
        "name": item.name,
        "price": item.price,
        "category": item.category,
        "pcs": item.pcs,
        "cooking_styles": list(item.cooking_styles),
        "description": item.description,
        "is_jain": item.is_jain,
    }


def default_menu() -> list[MenuItem]:
    """Return a fresh copy of the seed catalog."""
    return [menu_item_from_dict(raw) for raw in DEFAULT_MENU_ITEMS]


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def format_price(price: int) -> str:
    return f"₹{price}"


def menu_by_category(items: Iterable[MenuItem]) -> dict[str, list[MenuItem]]:
    """Group items by category, keeping catalog order inside and across groups."""
    grouped: dict[str, list[MenuItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def search_menu(items: Iterable[MenuItem], category: str, query: str = "") -> list[MenuItem]:
    """Case-insensitive name search scoped to one category."""
    source = [item for item in items if item.category == category]
    if not query:
        return source
    q = query.lower()
    return [item for item in source if q in item.name.lower()]

