"""Scriptable in-memory ledger used by coordinator and application tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chainmark.domain.errors import LedgerError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chainmark.domain.ports.ledger import LedgerClient, LedgerRecord


@dataclass
class FakeLedgerClient:
    """Keeps an on-ledger record per product and hands out ``tx-<n>`` references.

    ``failures`` maps an operation name (``create_record``, ``append_stage``,
    ``read_record``) to the exception it should raise. ``next_references`` queues
    explicit references to return before falling back to the counter.
    """

    failures: dict[str, BaseException] = field(default_factory=dict)
    next_references: list[str] = field(default_factory=list)
    records: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    _counter: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def fail(self, operation: str, error: BaseException | None = None) -> None:
        self.failures[operation] = error or LedgerError(f"{operation} unavailable")

    def recover(self) -> None:
        self.failures.clear()

    def create_record(self, product_id: str, fields: Mapping[str, str]) -> str:
        with self._lock:
            self._record_call("create_record", product_id)
            reference = self._next_reference()
            self.records[product_id] = {"productId": product_id, **fields, "stages": []}
            return reference

    def append_stage(self, product_id: str, stage: str) -> str:
        with self._lock:
            self._record_call("append_stage", product_id)
            reference = self._next_reference()
            record = self.records.setdefault(product_id, {"productId": product_id, "stages": []})
            stages = record["stages"]
            assert isinstance(stages, list)
            stages.append(stage)
            return reference

    def read_record(self, product_id: str) -> LedgerRecord | None:
        with self._lock:
            self._record_call("read_record", product_id)
            return self.records.get(product_id)

    def calls_for(self, operation: str) -> list[str]:
        return [product_id for name, product_id in self.calls if name == operation]

    def _record_call(self, operation: str, product_id: str) -> None:
        self.calls.append((operation, product_id))
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def _next_reference(self) -> str:
        if self.next_references:
            return self.next_references.pop(0)
        self._counter += 1
        return f"tx-{self._counter}"


if TYPE_CHECKING:
    _ledger_check: LedgerClient = FakeLedgerClient()
