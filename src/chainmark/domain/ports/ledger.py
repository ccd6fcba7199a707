"""Port for the external append-only ledger."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

type LedgerRecord = Mapping[str, object]


@runtime_checkable
class LedgerClient(Protocol):
    """Best-effort access to the external ledger.

    Implementations bound every call by a timeout and raise ``LedgerError`` for any
    failure; they do not retry on their own.
    """

    def create_record(self, product_id: str, fields: Mapping[str, str]) -> str:
        """Register a product on the ledger and return the transaction reference."""
        ...

    def append_stage(self, product_id: str, stage: str) -> str:
        """Append a custody-chain stage and return the transaction reference."""
        ...

    def read_record(self, product_id: str) -> LedgerRecord | None:
        """Return the current on-ledger state, or ``None`` when nothing is recorded."""
        ...


__all__ = ["LedgerClient", "LedgerRecord"]
