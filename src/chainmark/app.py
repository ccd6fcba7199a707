"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from chainmark.adapters.ledger import HttpLedgerClient, is_cacheable_record
from chainmark.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProvenanceUnitOfWork,
    is_started,
    startup,
)
from chainmark.config.ledger import get_ledger_config
from chainmark.domain.reconciliation import ReconciliationCoordinator
from chainmark.inputs import parse_product_fields

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chainmark.domain.ports.ledger import LedgerClient
    from chainmark.domain.ports.unit_of_work import ProvenanceUnitOfWork
    from chainmark.domain.reconciliation import QrRenderer
    from chainmark.inputs import UnknownFieldPolicy

UnitOfWorkFactory = Callable[[], "ProvenanceUnitOfWork"]


log = getLogger(__name__)


def build_coordinator(
    *,
    ledger: LedgerClient | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    qr_renderer: QrRenderer | None = None,
) -> ReconciliationCoordinator:
    """Wire the coordinator to the configured ledger gateway and database."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyProvenanceUnitOfWork
    effective_ledger = ledger or HttpLedgerClient(
        config=get_ledger_config(cache_predicate=is_cacheable_record)
    )
    return ReconciliationCoordinator(
        ledger=effective_ledger,
        unit_of_work_factory=unit_of_work_factory,
        qr_renderer=qr_renderer,
        logger=getLogger("chainmark.reconciliation"),
    )


def create_product(
    fields: Mapping[str, object],
    certificate: bytes | None = None,
    *,
    coordinator: ReconciliationCoordinator | None = None,
    unknown_fields: UnknownFieldPolicy = "reject",
) -> dict[str, object]:
    """Validate ``fields`` and create the product; returns the JSON payload."""

    draft = parse_product_fields(fields, unknown_fields=unknown_fields)
    active = coordinator or build_coordinator()
    result = active.create_product(draft, certificate)
    return result.as_payload()


def append_stage(
    product_id: str,
    stage: str,
    *,
    coordinator: ReconciliationCoordinator | None = None,
) -> dict[str, object]:
    active = coordinator or build_coordinator()
    return active.append_stage(product_id, stage).as_payload()


def read_product(
    product_id: str,
    *,
    coordinator: ReconciliationCoordinator | None = None,
) -> dict[str, object]:
    active = coordinator or build_coordinator()
    return active.read_product(product_id).as_payload()


def read_by_certification_hash(
    certification_hash: str,
    *,
    coordinator: ReconciliationCoordinator | None = None,
) -> dict[str, object]:
    active = coordinator or build_coordinator()
    return active.read_by_certification_hash(certification_hash).as_payload()


def list_products(
    *,
    coordinator: ReconciliationCoordinator | None = None,
) -> list[dict[str, object]]:
    active = coordinator or build_coordinator()
    products = active.list_products()
    log.info("Listing %d products", len(products))
    return [product.as_payload() for product in products]
