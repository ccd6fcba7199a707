"""Reconciliation between the local provenance store and the external ledger."""

from __future__ import annotations

from .contracts import CreationResult, ProductView, QrRenderer, StageResult
from .coordinator import OperationLogger, ReconciliationCoordinator

__all__ = [
    "CreationResult",
    "OperationLogger",
    "ProductView",
    "QrRenderer",
    "ReconciliationCoordinator",
    "StageResult",
]
