"""Editable static demo catalog, customers and tip text."""

from __future__ import annotations

# Demo catalog seeded into a fresh local store. Variants are generated from the
# cartesian product of option values, minus MISSING combinations.
# STOCK keys are option values joined by "/"; unlisted variants get DEFAULT_STOCK.
DEMO_PRODUCTS: list[dict[str, object]] = [
    {
        "product_id": "gid://shopify/Product/1001",
        "title": "Classic Crew Tee",
        "image_url": "https://cdn.matrix-order.local/products/classic-crew-tee.jpg",
        "options": [
            ("Size", ["S", "M", "L", "XL"]),
            ("Color", ["Black", "White", "Heather Grey", "Navy"]),
        ],
        "price": "18.00",
        "price_overrides": {"XL": "20.50"},
        "default_stock": 25,
        "stock": {
            "S/Navy": 0,
            "M/White": 4,
            "L/Black": 2,
            "XL/Navy": None,
        },
        "missing": ["XL/Heather Grey"],
    },
    {
        "product_id": "gid://shopify/Product/1002",
        "title": "Canvas Tote",
        "image_url": None,
        "options": [
            ("Color", ["Natural", "Black", "Olive"]),
        ],
        "price": "24.99",
        "price_overrides": {},
        "default_stock": 12,
        "stock": {"Black": 0, "Olive": 5},
        "missing": [],
    },
    {
        "product_id": "gid://shopify/Product/1003",
        "title": "Performance Sock",
        "image_url": None,
        "options": [
            ("Size", ["S-M", "L-XL"]),
            ("Color", ["White", "Black"]),
            ("Pack", ["3-Pack", "6-Pack"]),
        ],
        "price": "14.00",
        "price_overrides": {},
        "default_stock": 40,
        "stock": {},
        "missing": [],
    },
]

DEMO_CUSTOMERS: list[dict[str, str]] = [
    {"customer_id": "gid://shopify/Customer/501", "first_name": "Ada", "last_name": "Okafor", "email": "ada@northwind.example"},
    {"customer_id": "gid://shopify/Customer/502", "first_name": "Marco", "last_name": "Bellini", "email": "marco@bellini.example"},
    {"customer_id": "gid://shopify/Customer/503", "first_name": "", "last_name": "", "email": "orders@greenleaf.example"},
    {"customer_id": "gid://shopify/Customer/504", "first_name": "Yuki", "last_name": "Tanaka", "email": "yuki@tanaka.example"},
]

TIPS: list[str] = [
    "Use the arrow keys to move around the grid.",
    "Paste a column copied from a spreadsheet to fill rows downward.",
    "Press Enter to move down. At the bottom it jumps to the next column.",
    "Out of stock items are blocked to prevent backorders.",
]
