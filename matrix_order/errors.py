"""Custom exceptions for matrix-quick-order."""

from __future__ import annotations


class MatrixOrderError(Exception):
    """Base exception for all matrix-quick-order errors."""

    pass


class InputParseError(MatrixOrderError, ValueError):
    """Raised when a typed or pasted quantity is not a non-negative integer."""

    def __init__(self, raw: object):
        self.raw = raw
        super().__init__(f"Not a quantity: {raw!r}")


class StaleReferenceError(MatrixOrderError, LookupError):
    """Raised when a variant id is not part of the current product."""

    def __init__(self, variant_id: str):
        self.variant_id = variant_id
        super().__init__(f"Variant not in current product: {variant_id}")


class EmptyCartError(MatrixOrderError):
    """Raised when an order is submitted with no positive quantities."""

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class OversellError(MatrixOrderError):
    """Raised when a line asks for more than the known positive stock."""

    def __init__(self) -> None:
        super().__init__("Not Enough Stock")


class BackendValidationError(MatrixOrderError):
    """Raised when the commerce backend rejects a submission."""

    def __init__(self, message: str, field: tuple[str, ...] = ()):
        self.message = message
        self.field = field
        super().__init__(message)


class BackendUnavailableError(MatrixOrderError):
    """Raised when the commerce backend cannot be reached or read."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Backend {operation} failed: {reason}")


class IncompatibleProductError(MatrixOrderError):
    """Raised when a product has neither one nor two options."""

    def __init__(self, title: str, option_count: int):
        self.title = title
        self.option_count = option_count
        super().__init__(
            f'Product "{title}" has {option_count} options. This app supports 1 or 2 options only.'
        )
