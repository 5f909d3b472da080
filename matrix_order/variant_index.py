"""Lookup structures over a product's variants."""

from __future__ import annotations

from matrix_order.errors import IncompatibleProductError, StaleReferenceError
from matrix_order.models import Product, ProductOption, Variant

TITLE_DELIMITER = " | "


class VariantIndex:
    """Variant lookups by id and by grid coordinate for one product.

    Rows always follow the first option's values. A two-option product adds
    columns from the second option's values; a single-option product has
    exactly one column. Built once per product and never updated in place.
    """

    def __init__(self, product: Product) -> None:
        option_count = len(product.options)
        if option_count not in (1, 2):
            raise IncompatibleProductError(product.title, option_count)

        self.product = product
        self.by_id: dict[str, Variant] = {}
        self._by_coordinate: dict[tuple[str, ...], Variant] = {}

        for variant in product.variants:
            self.by_id.setdefault(variant.variant_id, variant)
            coordinate = self._coordinate_for(variant)
            if coordinate is not None:
                self._by_coordinate.setdefault(coordinate, variant)

    @property
    def row_option(self) -> ProductOption:
        return self.product.options[0]

    @property
    def col_option(self) -> ProductOption | None:
        if len(self.product.options) < 2:
            return None
        return self.product.options[1]

    @property
    def is_matrix(self) -> bool:
        return self.col_option is not None

    @property
    def row_count(self) -> int:
        return len(self.row_option.values)

    @property
    def col_count(self) -> int:
        col_option = self.col_option
        return 1 if col_option is None else len(col_option.values)

    def _coordinate_for(self, variant: Variant) -> tuple[str, ...] | None:
        values = []
        for option in self.product.options:
            value = variant.option_value(option.name)
            if value is None or value not in option.values:
                return None
            values.append(value)
        return tuple(values)

    def get(self, variant_id: str) -> Variant | None:
        return self.by_id.get(variant_id)

    def require(self, variant_id: str) -> Variant:
        variant = self.by_id.get(variant_id)
        if variant is None:
            raise StaleReferenceError(variant_id)
        return variant

    def __contains__(self, variant_id: object) -> bool:
        return variant_id in self.by_id

    def at_values(self, row_value: str, col_value: str | None = None) -> Variant | None:
        """Variant at an option-value pair, or None for an unavailable combination."""
        if col_value is None:
            return self._by_coordinate.get((row_value,))
        return self._by_coordinate.get((row_value, col_value))

    def cell(self, row: int, col: int = 0) -> Variant | None:
        """Variant at a grid position, or None when the position is empty or out of range."""
        if not (0 <= row < self.row_count and 0 <= col < self.col_count):
            return None
        row_value = self.row_option.values[row]
        col_option = self.col_option
        if col_option is None:
            return self.at_values(row_value)
        return self.at_values(row_value, col_option.values[col])

    def line_title(self, variant: Variant) -> str:
        """Readable label for a variant, in option declaration order."""
        parts = []
        for option in self.product.options:
            value = variant.option_value(option.name)
            if value is not None:
                parts.append(f"{option.name}: {value}")
        if not parts:
            return variant.title or variant.variant_id
        return TITLE_DELIMITER.join(parts)
