"""Keyboard and paste handling for the quantity grid.

The navigator only computes coordinates and cart updates. Resolving a
coordinate to something focusable is the presentation layer's job.
"""

from __future__ import annotations

import re

from matrix_order.errors import InputParseError
from matrix_order.quantities import parse_quantity
from matrix_order.variant_index import VariantIndex

Cell = tuple[int, int]

LIST_KEYS = frozenset({"up", "down", "enter"})
MATRIX_KEYS = frozenset({"up", "down", "enter", "left", "right"})

_LINE_BREAK = re.compile(r"\r?\n")


def is_navigation_key(key: str, matrix: bool) -> bool:
    return key in (MATRIX_KEYS if matrix else LIST_KEYS)


def next_index(key: str, index: int, count: int) -> int | None:
    """Next focus index in a single-option list, or None when nothing moves."""
    if key == "up":
        target = index - 1
    elif key in {"down", "enter"}:
        target = index + 1
    else:
        return None
    if not (0 <= target < count):
        return None
    return target


def next_cell(key: str, cell: Cell, row_count: int, col_count: int) -> Cell | None:
    """Next focus cell in a two-option matrix, or None when nothing moves.

    Enter or Down past the last row wraps to the top of the next column.
    """
    row, col = cell
    if key == "up":
        target = (row - 1, col)
    elif key in {"down", "enter"}:
        target = (row + 1, col)
    elif key == "left":
        target = (row, col - 1)
    elif key == "right":
        target = (row, col + 1)
    else:
        return None

    target_row, target_col = target
    if 0 <= target_row < row_count and 0 <= target_col < col_count:
        return target

    if key in {"down", "enter"} and target_row >= row_count:
        wrapped = (0, col + 1)
        if row_count > 0 and wrapped[1] < col_count:
            return wrapped
    return None


def navigate(key: str, cell: Cell, index: VariantIndex) -> Cell | None:
    """Dispatch to list or matrix navigation depending on the product shape."""
    if index.is_matrix:
        return next_cell(key, cell, index.row_count, index.col_count)
    target = next_index(key, cell[0], index.row_count)
    if target is None:
        return None
    return (target, 0)


def split_paste(text: str) -> list[str]:
    return _LINE_BREAK.split(text)


def paste_updates(text: str, start: Cell, index: VariantIndex) -> list[tuple[str, int]]:
    """Cart updates for clipboard text pasted at a cell.

    Line N goes to the row N below the start cell in the same column, matched
    by option value position. Unparsable or negative lines, lines past the
    last row, and positions without an in-stock variant are skipped.
    """
    start_row, col = start
    updates: list[tuple[str, int]] = []
    for offset, line in enumerate(split_paste(text)):
        row = start_row + offset
        if row >= index.row_count:
            break
        try:
            quantity = parse_quantity(line)
        except InputParseError:
            continue
        variant = index.cell(row, col)
        if variant is None or variant.stock <= 0:
            continue
        updates.append((variant.variant_id, quantity))
    return updates
