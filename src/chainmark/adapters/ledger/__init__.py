"""Public interface for the ledger gateway adapter."""

from __future__ import annotations

from .client import HttpLedgerClient, LedgerAPIError, is_cacheable_record
from .schema import ErrorResponse, RecordResponse, TransactionResponse

__all__ = [
    "ErrorResponse",
    "HttpLedgerClient",
    "LedgerAPIError",
    "RecordResponse",
    "TransactionResponse",
    "is_cacheable_record",
]
