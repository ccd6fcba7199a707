"""Dual-write and merged-read orchestration between the local store and the ledger.

Off-chain durability is unconditional; on-chain anchoring is advisory. Every ledger
call is attempted at most once per operation, and its failure only ever shows up as
an ``Unanchored`` outcome or a missing ``on_chain`` snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chainmark.domain.errors import (
    DuplicateProductError,
    LedgerError,
    ProductNotFoundError,
    SerializationError,
    ValidationError,
)
from chainmark.domain.hashing import digest
from chainmark.domain.model import Anchored, Unanchored, placeholder_reference, utcnow
from chainmark.domain.normalize import normalize

from .contracts import CreationResult, ProductView, StageResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chainmark.domain.model import Anchoring, NewProduct, Product
    from chainmark.domain.ports.ledger import LedgerClient
    from chainmark.domain.ports.unit_of_work import ProvenanceUnitOfWork

    from .contracts import QrRenderer

type OperationLogger = logging.Logger | logging.LoggerAdapter[logging.Logger]


def _default_logger() -> logging.Logger:
    return logging.getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ReconciliationCoordinator:
    ledger: LedgerClient
    unit_of_work_factory: Callable[[], ProvenanceUnitOfWork]
    qr_renderer: QrRenderer | None = None
    logger: OperationLogger = field(default_factory=_default_logger)

    def create_product(
        self,
        draft: NewProduct,
        certificate: bytes | None = None,
        *,
        logger: OperationLogger | None = None,
    ) -> CreationResult:
        """Persist a new product, anchoring it on the ledger when possible."""

        log = logger or self.logger
        product_id = draft.product_id

        with self.unit_of_work_factory() as uow:
            if uow.repositories.products.find_by_id(product_id) is not None:
                raise DuplicateProductError(product_id)

        if certificate is not None:
            certification_hash = digest(certificate)
        else:
            certification_hash = draft.blockchain_ref_hash

        anchoring = self._attempt(
            "create_record",
            product_id,
            lambda: self.ledger.create_record(product_id, draft.ledger_fields(certification_hash)),
            log,
        )
        if isinstance(anchoring, Anchored):
            reference = anchoring.reference
        else:
            reference = draft.blockchain_ref_hash or placeholder_reference()
            log.info("Product %s stored with unanchored reference %s", product_id, reference)

        product = draft.build(certification_hash=certification_hash, blockchain_ref_hash=reference)
        with self.unit_of_work_factory() as uow:
            uow.repositories.products.create(product)
            uow.commit()
        log.info("Product %s created (anchored=%s)", product_id, anchoring.is_anchored)

        return CreationResult(
            product=product,
            anchoring=anchoring,
            qr_code=self._render_qr(product_id, log),
        )

    def append_stage(
        self,
        product_id: str,
        stage: str,
        *,
        logger: OperationLogger | None = None,
    ) -> StageResult:
        """Append a custody-chain stage locally, anchoring it when possible."""

        log = logger or self.logger
        if not stage or not stage.strip():
            raise ValidationError("Stage is required")

        with self.unit_of_work_factory() as uow:
            if uow.repositories.products.find_by_id(product_id) is None:
                raise ProductNotFoundError(product_id)

        anchoring = self._attempt(
            "append_stage",
            product_id,
            lambda: self.ledger.append_stage(product_id, stage),
            log,
        )

        with self.unit_of_work_factory() as uow:
            products = uow.repositories.products
            product = products.append_stage(product_id, stage, recorded_at=utcnow())
            if isinstance(anchoring, Anchored):
                product = products.set_ledger_ref(product_id, anchoring.reference)
            uow.commit()
        log.info(
            "Stage %r appended to product %s (%d stages, anchored=%s)",
            stage,
            product_id,
            len(product.stages),
            anchoring.is_anchored,
        )
        return StageResult(product=product, anchoring=anchoring)

    def read_product(
        self,
        product_id: str,
        *,
        logger: OperationLogger | None = None,
    ) -> ProductView:
        """Return the local product merged with a best-effort ledger snapshot."""

        log = logger or self.logger
        with self.unit_of_work_factory() as uow:
            product = uow.repositories.products.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return self._merge(product, log)

    def read_by_certification_hash(
        self,
        certification_hash: str,
        *,
        logger: OperationLogger | None = None,
    ) -> ProductView:
        """Look a product up by certificate hash, falling back to its ledger reference."""

        log = logger or self.logger
        with self.unit_of_work_factory() as uow:
            products = uow.repositories.products
            product = products.find_by_certification_hash(certification_hash)
            if product is None:
                product = products.find_by_ledger_ref(certification_hash)
                if product is not None:
                    log.debug(
                        "Hash %s matched product %s by ledger reference",
                        certification_hash,
                        product.product_id,
                    )
        if product is None:
            raise ProductNotFoundError(certification_hash, field="certificationHash")
        return self._merge(product, log)

    def list_products(self) -> Sequence[Product]:
        with self.unit_of_work_factory() as uow:
            return list(uow.repositories.products.list_all())

    def _merge(self, product: Product, log: OperationLogger) -> ProductView:
        try:
            record = self.ledger.read_record(product.product_id)
            on_chain = normalize(record) if record is not None else None
        except (LedgerError, SerializationError) as exc:
            log.warning("Ledger read failed for product %s: %s", product.product_id, exc)
            on_chain = None
        except Exception:  # noqa: BLE001
            log.exception("Unexpected ledger failure reading product %s", product.product_id)
            on_chain = None
        return ProductView(product=product, on_chain=on_chain)

    def _attempt(
        self,
        operation: str,
        product_id: str,
        call: Callable[[], str],
        log: OperationLogger,
    ) -> Anchoring:
        try:
            reference = call()
        except LedgerError as exc:
            log.warning("Ledger %s failed for product %s: %s", operation, product_id, exc)
            return Unanchored(reason=str(exc) or type(exc).__name__)
        except Exception as exc:  # noqa: BLE001
            log.exception("Unexpected ledger failure in %s for product %s", operation, product_id)
            return Unanchored(reason=f"{type(exc).__name__}: {exc}")
        if not reference:
            log.warning("Ledger %s for product %s returned no reference", operation, product_id)
            return Unanchored(reason="empty transaction reference")
        return Anchored(reference=reference)

    def _render_qr(self, product_id: str, log: OperationLogger) -> str | None:
        if self.qr_renderer is None:
            return None
        try:
            return self.qr_renderer(product_id)
        except Exception:  # noqa: BLE001
            log.exception("QR rendering failed for product %s", product_id)
            return None
