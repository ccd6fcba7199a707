"""Error taxonomy shared by the provenance core and its adapters.

Ledger-side failures (``LedgerError``, ``SerializationError``) are absorbed by the
reconciliation coordinator; local failures (``ValidationError``, ``NotFoundError``,
``StorageError``) always reach the caller.
"""

from __future__ import annotations


class ChainmarkError(Exception):
    """Base class for all domain errors."""


class ValidationError(ChainmarkError, ValueError):
    """Raised for malformed or missing caller input, before any side effect."""


class NotFoundError(ChainmarkError, LookupError):
    """Raised when a requested record has no local counterpart."""


class ProductNotFoundError(NotFoundError):
    def __init__(self, key: str, *, field: str = "productId") -> None:
        super().__init__(f"Product not found for {field}={key!r}")
        self.key = key
        self.field = field


class LedgerError(ChainmarkError):
    """Raised by ledger adapters for any failure, timeouts included."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StorageError(ChainmarkError):
    """Raised when the local durable store fails; always fatal to the operation."""


class DuplicateProductError(StorageError):
    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product already exists: {product_id!r}")
        self.product_id = product_id


class SerializationError(ChainmarkError):
    """Raised when a ledger value cannot be normalized into transport-safe data."""
