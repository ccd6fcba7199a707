"""Domain port definitions for adapters."""

from __future__ import annotations

from .ledger import LedgerClient, LedgerRecord
from .persistence import ProvenanceStore
from .unit_of_work import (
    ProvenanceRepositories,
    ProvenanceUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "LedgerClient",
    "LedgerRecord",
    "ProvenanceRepositories",
    "ProvenanceStore",
    "ProvenanceUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
]
