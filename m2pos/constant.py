"""Editable seed menu and category configuration."""

from __future__ import annotations

CATEGORY_LABELS: dict[str, str] = {
    "momos": "Momos",
    "maggie": "Maggie & Drinks",
    "combo": "Combo",
}

# Search-mode key per category on the main screen.
CATEGORY_KEYS: dict[str, str] = {
    "m": "momos",
    "g": "maggie",
    "o": "combo",
}

COOKING_STYLES: tuple[str, ...] = ("Steam", "Fried")

PAYMENT_METHODS: tuple[str, ...] = ("cash", "upi")

# Canonical seed values consumed by m2pos.data (which wraps these into MenuItem instances).
DEFAULT_MENU_ITEMS: list[dict[str, object]] = [
    {
        "id": "trio-steam",
        "name": "The Trio",
        "price": 50,
        "category": "momos",
        "pcs": 3,
        "cooking_styles": ["Steam"],
        "description": "Classic steamed momos trio",
        "is_jain": False,
    },
    {
        "id": "masala-magic",
        "name": "Masala Magic Momos",
        "price": 99,
        "category": "momos",
        "pcs": 7,
        "cooking_styles": ["Steam", "Fried"],
        "description": "Spicy masala-infused momos",
        "is_jain": False,
    },
    {
        "id": "paneer-momos",
        "name": "Paneer Momos",
        "price": 120,
        "category": "momos",
        "pcs": 8,
        "cooking_styles": ["Steam", "Fried"],
        "description": "Premium paneer-stuffed momos",
        "is_jain": False,
    },
    {
        "id": "jain-momos",
        "name": "Jain Momos",
        "price": 120,
        "category": "momos",
        "pcs": 8,
        "cooking_styles": ["Steam", "Fried"],
        "description": "No Onion | No Garlic",
        "is_jain": True,
    },
    {
        "id": "cooker-maggie",
        "name": "Special Cooker Maggie Bowl",
        "price": 70,
        "category": "maggie",
        "pcs": None,
        "cooking_styles": [None],
        "description": "Authentic pressure-cooked maggie",
        "is_jain": False,
    },
    {
        "id": "cold-drink",
        "name": "Cold Drink",
        "price": 29,
        "category": "maggie",
        "pcs": None,
        "cooking_styles": [None],
        "description": "Chilled refreshment",
        "is_jain": False,
    },
    {
        "id": "m2-combo",
        "name": "M² Combo",
        "price": 160,
        "category": "combo",
        "pcs": None,
        "cooking_styles": [None],
        "description": "Maggie + Momos + Drink",
        "is_jain": False,
    },
]
