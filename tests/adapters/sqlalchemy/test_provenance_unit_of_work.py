from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, text

from chainmark.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProvenanceUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from chainmark.domain.errors import StorageError
from chainmark.domain.model import NewProduct
from chainmark.domain.reconciliation import ReconciliationCoordinator
from tests.helpers.ledger import FakeLedgerClient

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyProvenanceUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_startup_from_database_uri_migrates_schema(tmp_path: Path) -> None:
    startup(database_uri=f"sqlite+pysqlite:///{tmp_path / 'chainmark.db'}")

    engine = configured_engine()
    assert engine is not None
    with engine.connect() as connection:
        tables = {
            row[0]
            for row in connection.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
        }
    assert {"product", "product_stage", "alembic_version"} <= tables


def test_unit_of_work_commits_and_rolls_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    product = NewProduct(product_id="P1", name="Coffee").build(
        certification_hash="abc", blockchain_ref_hash="tx-1"
    )

    with SqlAlchemyProvenanceUnitOfWork() as uow:
        uow.repositories.products.create(product)
        uow.commit()

    with pytest.raises(RuntimeError), SqlAlchemyProvenanceUnitOfWork() as uow:
        uow.repositories.products.append_stage("P1", "lost")
        raise RuntimeError("abort before commit")

    with SqlAlchemyProvenanceUnitOfWork() as uow:
        stored = uow.repositories.products.find_by_id("P1")
        assert stored is not None
        assert stored.stages == ()


def test_repositories_unavailable_outside_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyProvenanceUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_failures_surface_as_storage_errors(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyProvenanceUnitOfWork() as uow:
        uow.session.execute(text("DROP TABLE product_stage"))
        uow.session.execute(text("DROP TABLE product"))
        uow.session.add(
            NewProduct(product_id="P1", name="Coffee").build(
                certification_hash="", blockchain_ref_hash=""
            )
        )
        with pytest.raises(StorageError):
            uow.commit()


def test_concurrent_appends_keep_every_stage(tmp_path: Path) -> None:
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'concurrent.db'}",
        future=True,
        connect_args={"timeout": 30},
    )
    startup(engine=engine, force=True)
    coordinator = ReconciliationCoordinator(
        ledger=FakeLedgerClient(),
        unit_of_work_factory=SqlAlchemyProvenanceUnitOfWork,
    )
    coordinator.create_product(NewProduct(product_id="P1", name="Coffee"))
    labels = [f"stage-{worker}-{step}" for worker in range(4) for step in range(5)]

    def append(worker: int) -> None:
        for step in range(5):
            coordinator.append_stage("P1", f"stage-{worker}-{step}")

    with ThreadPoolExecutor(max_workers=4) as executor:
        list(executor.map(append, range(4)))

    stored = coordinator.read_product("P1").product
    assert sorted(stored.stages) == sorted(labels)
    assert len(stored.stages) == len(labels)
    for worker in range(4):
        own = [label for label in stored.stages if label.startswith(f"stage-{worker}-")]
        assert own == [f"stage-{worker}-{step}" for step in range(5)]
