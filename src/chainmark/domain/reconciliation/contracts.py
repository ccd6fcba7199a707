"""Result types returned by the reconciliation coordinator."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chainmark.domain.model import Anchored

if TYPE_CHECKING:
    from chainmark.domain.model import Anchoring, Product

type QrRenderer = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class CreationResult:
    """A persisted product and the outcome of anchoring it.

    ``transaction_ref`` is the ledger reference when anchored, otherwise the fallback
    reference stored on the product.
    """

    product: Product
    anchoring: Anchoring
    qr_code: str | None = None

    @property
    def transaction_ref(self) -> str:
        if isinstance(self.anchoring, Anchored):
            return self.anchoring.reference
        return self.product.blockchain_ref_hash

    def as_payload(self) -> dict[str, object]:
        return {
            "product": self.product.as_payload(),
            "transactionRef": self.transaction_ref,
            "anchored": self.anchoring.is_anchored,
            "qrCode": self.qr_code,
        }


@dataclass(frozen=True, slots=True)
class StageResult:
    product: Product
    anchoring: Anchoring

    @property
    def transaction_ref(self) -> str | None:
        if isinstance(self.anchoring, Anchored):
            return self.anchoring.reference
        return None

    def as_payload(self) -> dict[str, object]:
        return {
            "product": self.product.as_payload(),
            "transactionRef": self.transaction_ref,
        }


@dataclass(frozen=True, slots=True)
class ProductView:
    """The authoritative local product plus a read-only, normalized ledger snapshot."""

    product: Product
    on_chain: object | None = None

    def as_payload(self) -> dict[str, object]:
        return {
            "product": self.product.as_payload(),
            "onChain": self.on_chain,
        }
