"""Tests for rich renderables."""

from dataclasses import replace

from matrix_order.rendering import format_product_header


def test_product_header_shows_image(tee_product):
    product = replace(tee_product, image_url="https://cdn.example.test/tee.jpg")
    text = format_product_header(product).plain
    assert text.startswith("▣ Classic Tee")
    assert "Size / Color" in text
    assert "https://cdn.example.test/tee.jpg" in text


def test_product_header_without_image(tote_product):
    text = format_product_header(tote_product).plain
    assert text == "□ Canvas Tote  Color"
