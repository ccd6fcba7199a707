from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from chainmark.adapters.sqlalchemy import start_mappers
from chainmark.adapters.sqlalchemy.migrations import upgrade_head
from chainmark.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProvenanceUnitOfWork,
    shutdown,
    startup,
)
from chainmark.domain.reconciliation import ReconciliationCoordinator
from tests.helpers.ledger import FakeLedgerClient

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyProvenanceUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyProvenanceUnitOfWork:
        return SqlAlchemyProvenanceUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def ledger() -> FakeLedgerClient:
    return FakeLedgerClient()


@pytest.fixture
def coordinator(
    ledger: FakeLedgerClient,
    sqlite_unit_of_work: Callable[[], SqlAlchemyProvenanceUnitOfWork],
) -> ReconciliationCoordinator:
    return ReconciliationCoordinator(ledger=ledger, unit_of_work_factory=sqlite_unit_of_work)
