"""Pytest fixtures for matrix-quick-order tests."""

from decimal import Decimal

import pytest

from matrix_order.backend import SqliteBackend
from matrix_order.models import Product, ProductOption, Variant
from matrix_order.variant_index import VariantIndex


def make_variant(variant_id, price, stock=10, **options):
    return Variant(
        variant_id=variant_id,
        price=Decimal(price),
        selected_options=tuple(options.items()),
        inventory_quantity=stock,
        title=" / ".join(options.values()),
    )


@pytest.fixture
def tee_product():
    """Size x Color matrix: XL/White is missing, L/Black and XL/Black are sold out."""
    sizes = ("S", "M", "L", "XL")
    colors = ("Black", "White")
    variants = []
    stock = {("M", "White"): 3, ("L", "Black"): 0, ("XL", "Black"): None}
    for size in sizes:
        for color in colors:
            if (size, color) == ("XL", "White"):
                continue
            variants.append(
                make_variant(
                    f"v-{size}-{color}",
                    "20.50" if size == "XL" else "18.00",
                    stock.get((size, color), 25),
                    Size=size,
                    Color=color,
                )
            )
    return Product(
        product_id="p-tee",
        title="Classic Tee",
        options=(ProductOption("Size", sizes), ProductOption("Color", colors)),
        variants=tuple(variants),
    )


@pytest.fixture
def tote_product():
    """Single-option product."""
    return Product(
        product_id="p-tote",
        title="Canvas Tote",
        options=(ProductOption("Color", ("Natural", "Black", "Olive", "Red")),),
        variants=(
            make_variant("t-natural", "24.99", 12, Color="Natural"),
            make_variant("t-black", "24.99", 0, Color="Black"),
            make_variant("t-olive", "24.99", 5, Color="Olive"),
            make_variant("t-red", "26.00", 8, Color="Red"),
        ),
    )


@pytest.fixture
def tee_index(tee_product):
    return VariantIndex(tee_product)


@pytest.fixture
def tote_index(tote_product):
    return VariantIndex(tote_product)


@pytest.fixture
def backend(tmp_path):
    """Seeded SQLite store in a temporary directory."""
    store = SqliteBackend(tmp_path / "store.db")
    store.bootstrap_schema()
    store.seed_demo_catalog()
    return store
