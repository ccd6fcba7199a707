"""Ports for persisting product provenance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from chainmark.domain.model import Product


@runtime_checkable
class ProvenanceStore(Protocol):
    """Durable keyed store for products; the system of record for existence.

    Mutations are single atomic statements: ``append_stage`` inserts one row and
    ``set_ledger_ref`` updates one column, so concurrent callers never overwrite
    each other's stages.
    """

    def create(self, product: Product) -> None: ...

    def append_stage(
        self,
        product_id: str,
        stage: str,
        *,
        recorded_at: datetime | None = None,
    ) -> Product: ...

    def set_ledger_ref(self, product_id: str, reference: str) -> Product: ...

    def find_by_id(self, product_id: str) -> Product | None: ...

    def find_by_certification_hash(self, certification_hash: str) -> Product | None: ...

    def find_by_ledger_ref(self, reference: str) -> Product | None: ...

    def list_all(self) -> Sequence[Product]: ...
