"""In-memory cart: requested quantity per variant id."""

from __future__ import annotations

from typing import Iterable, Iterator

from matrix_order.errors import InputParseError
from matrix_order.variant_index import VariantIndex


def parse_quantity(raw: object) -> int:
    """Parse a typed or pasted quantity as a non-negative integer."""
    if isinstance(raw, bool):
        raise InputParseError(raw)
    if isinstance(raw, int):
        if raw < 0:
            raise InputParseError(raw)
        return raw
    text = str(raw if raw is not None else "").strip()
    if not text.isascii() or not text.isdigit():
        raise InputParseError(raw)
    return int(text)


class QuantityStore:
    """Sparse variant-id -> quantity map.

    An id present in the store always has a quantity above zero. Absence means
    zero; zero is never stored.
    """

    def __init__(self) -> None:
        self._quantities: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._quantities)

    def __iter__(self) -> Iterator[str]:
        return iter(self._quantities)

    def __contains__(self, variant_id: object) -> bool:
        return variant_id in self._quantities

    def get(self, variant_id: str) -> int:
        return self._quantities.get(variant_id, 0)

    def items(self) -> list[tuple[str, int]]:
        return list(self._quantities.items())

    def as_dict(self) -> dict[str, int]:
        return dict(self._quantities)

    def set(self, variant_id: str, raw: object) -> int:
        """Set a quantity from raw input and return what is now stored.

        Invalid or zero input removes the entry instead of raising.
        """
        try:
            quantity = parse_quantity(raw)
        except InputParseError:
            quantity = 0
        if quantity <= 0:
            self._quantities.pop(variant_id, None)
            return 0
        self._quantities[variant_id] = quantity
        return quantity

    def bulk_load(self, pairs: Iterable[tuple[str | None, int]], index: VariantIndex) -> int:
        """Replace the cart with pairs that belong to the indexed product.

        Returns the number of units applied. When nothing matches, the cart is
        left as it was and 0 is returned.
        """
        loaded: dict[str, int] = {}
        for variant_id, quantity in pairs:
            if not variant_id or variant_id not in index:
                continue
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                continue
            loaded[variant_id] = quantity

        count = sum(loaded.values())
        if count > 0:
            self._quantities = loaded
        return count

    def clear(self) -> None:
        self._quantities.clear()

    def total(self) -> int:
        return sum(self._quantities.values())
