from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session  # noqa: TC002

from chainmark.adapters.sqlalchemy.repositories import SqlAlchemyProductRepository
from chainmark.domain.errors import DuplicateProductError, ProductNotFoundError, StorageError
from chainmark.domain.model import NewProduct, Product


def _product(
    product_id: str,
    *,
    certification_hash: str = "",
    reference: str = "tx-1",
    created_at: datetime | None = None,
) -> Product:
    product = NewProduct(product_id=product_id, name=f"Product {product_id}").build(
        certification_hash=certification_hash,
        blockchain_ref_hash=reference,
    )
    if created_at is not None:
        product.created_at = created_at
    return product


@pytest.fixture
def repository(sqlite_session: Session) -> SqlAlchemyProductRepository:
    return SqlAlchemyProductRepository(sqlite_session)


def test_create_and_find_by_id(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("P1", certification_hash="abc"))
    sqlite_session.commit()
    sqlite_session.expunge_all()

    found = repository.find_by_id("P1")

    assert found is not None
    assert found.name == "Product P1"
    assert found.certification_hash == "abc"
    assert found.stages == ()
    assert found.created_at.tzinfo is not None
    assert repository.find_by_id("missing") is None


def test_create_rejects_duplicate_ids(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("P1"))
    sqlite_session.commit()

    with pytest.raises(DuplicateProductError):
        repository.create(_product("P1"))


def test_append_stage_inserts_in_order(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("P1"))
    sqlite_session.commit()

    repository.append_stage("P1", "harvested")
    updated = repository.append_stage("P1", "shipped")
    sqlite_session.commit()

    assert updated.stages == ("harvested", "shipped")
    seqs = [stage.seq for stage in updated.custody_chain]
    assert seqs == sorted(seqs)
    assert all(seq is not None for seq in seqs)


def test_append_stage_normalises_naive_timestamps_to_utc(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("P1"))
    repository.append_stage("P1", "shipped", recorded_at=datetime(2024, 5, 1, 12, 0))  # noqa: DTZ001
    sqlite_session.commit()
    sqlite_session.expunge_all()

    found = repository.find_by_id("P1")

    assert found is not None
    assert found.custody_chain[0].recorded_at == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def test_append_stage_unknown_product(repository: SqlAlchemyProductRepository) -> None:
    with pytest.raises(ProductNotFoundError):
        repository.append_stage("missing", "shipped")


def test_set_ledger_ref_keeps_stages(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("P1", reference="unanchored-1-deadbeef"))
    repository.append_stage("P1", "shipped")
    sqlite_session.commit()

    updated = repository.set_ledger_ref("P1", "tx-42")
    sqlite_session.commit()

    assert updated.blockchain_ref_hash == "tx-42"
    assert updated.stages == ("shipped",)


def test_set_ledger_ref_rejects_unknown_product_and_empty_reference(
    repository: SqlAlchemyProductRepository,
) -> None:
    with pytest.raises(ProductNotFoundError):
        repository.set_ledger_ref("missing", "tx-1")
    with pytest.raises(ValueError, match="must not be empty"):
        repository.set_ledger_ref("missing", "")


def test_find_by_certification_hash_returns_earliest_match(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    now = datetime.now(tz=UTC)
    repository.create(_product("P2", certification_hash="abc", created_at=now))
    repository.create(
        _product("P1", certification_hash="abc", created_at=now - timedelta(minutes=5))
    )
    sqlite_session.commit()

    found = repository.find_by_certification_hash("abc")

    assert found is not None
    assert found.product_id == "P1"
    assert repository.find_by_certification_hash("other") is None


def test_find_by_ledger_ref(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("LEGACY", reference="0xabc"))
    sqlite_session.commit()

    found = repository.find_by_ledger_ref("0xabc")

    assert found is not None
    assert found.product_id == "LEGACY"
    assert repository.find_by_ledger_ref("0xdef") is None


def test_empty_lookup_keys_match_nothing(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("P1", certification_hash="", reference=""))
    sqlite_session.commit()

    assert repository.find_by_certification_hash("") is None
    assert repository.find_by_ledger_ref("") is None


def test_list_all_orders_by_creation(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    now = datetime.now(tz=UTC)
    repository.create(_product("B", created_at=now))
    repository.create(_product("A", created_at=now))
    repository.create(_product("C", created_at=now - timedelta(days=1)))
    sqlite_session.commit()

    assert [product.product_id for product in repository.list_all()] == ["C", "A", "B"]


def test_database_failures_surface_as_storage_errors(
    repository: SqlAlchemyProductRepository,
    sqlite_session: Session,
) -> None:
    repository.create(_product("P1"))
    sqlite_session.commit()
    sqlite_session.execute(text("DROP TABLE product_stage"))

    with pytest.raises(StorageError):
        repository.append_stage("P1", "shipped")
