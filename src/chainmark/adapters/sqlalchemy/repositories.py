"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, cast

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from chainmark.adapters.sqlalchemy.mappings import product_stage_table, product_table
from chainmark.domain.errors import DuplicateProductError, ProductNotFoundError, StorageError
from chainmark.domain.model import Product, utcnow

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy import ColumnElement
    from sqlalchemy.orm import Session


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into ``StorageError``."""

    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"Storage failure during {operation}: {exc}") from exc


class SqlAlchemyProductRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, product: Product) -> None:
        with storage_errors("create"):
            if self.session.get(Product, product.product_id) is not None:
                raise DuplicateProductError(product.product_id)
            self.session.add(product)
            try:
                self.session.flush()
            except IntegrityError as exc:
                self.session.rollback()
                raise DuplicateProductError(product.product_id) from exc

    def append_stage(
        self,
        product_id: str,
        stage: str,
        *,
        recorded_at: datetime | None = None,
    ) -> Product:
        with storage_errors("append_stage"):
            self._require(product_id)
            self.session.execute(
                insert(product_stage_table).values(
                    product_id=product_id,
                    label=stage,
                    recorded_at=recorded_at or utcnow(),
                )
            )
            return self._reload(product_id)

    def set_ledger_ref(self, product_id: str, reference: str) -> Product:
        if not reference:
            raise ValueError("Ledger reference must not be empty")
        with storage_errors("set_ledger_ref"):
            result = self.session.execute(
                update(product_table)
                .where(product_table.c.product_id == product_id)
                .values(blockchain_ref_hash=reference)
            )
            if cast("int", getattr(result, "rowcount", 0)) == 0:
                raise ProductNotFoundError(product_id)
            return self._reload(product_id)

    def find_by_id(self, product_id: str) -> Product | None:
        with storage_errors("find_by_id"):
            return self.session.get(Product, product_id)

    def find_by_certification_hash(self, certification_hash: str) -> Product | None:
        if not certification_hash:
            return None
        return self._first_where(product_table.c.certification_hash == certification_hash)

    def find_by_ledger_ref(self, reference: str) -> Product | None:
        if not reference:
            return None
        return self._first_where(product_table.c.blockchain_ref_hash == reference)

    def list_all(self) -> Sequence[Product]:
        with storage_errors("list_all"):
            stmt = select(Product).order_by(
                product_table.c.created_at, product_table.c.product_id
            )
            return self.session.execute(stmt).scalars().all()

    def _first_where(self, criterion: ColumnElement[bool]) -> Product | None:
        with storage_errors("lookup"):
            stmt = (
                select(Product)
                .where(criterion)
                .order_by(product_table.c.created_at, product_table.c.product_id)
                .limit(1)
            )
            return self.session.execute(stmt).scalars().first()

    def _require(self, product_id: str) -> None:
        stmt = select(product_table.c.product_id).where(product_table.c.product_id == product_id)
        if self.session.execute(stmt).scalar_one_or_none() is None:
            raise ProductNotFoundError(product_id)

    def _reload(self, product_id: str) -> Product:
        stmt = (
            select(Product)
            .where(product_table.c.product_id == product_id)
            .execution_options(populate_existing=True)
        )
        product = self.session.execute(stmt).scalars().one_or_none()
        if product is None:
            raise ProductNotFoundError(product_id)
        return product


if TYPE_CHECKING:
    from chainmark.domain.ports.persistence import ProvenanceStore

    _session_stub = cast("Session", object())
    _repo_check: ProvenanceStore = SqlAlchemyProductRepository(_session_stub)
