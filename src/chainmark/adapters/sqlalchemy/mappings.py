"""SQLAlchemy mapping metadata for the provenance domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from chainmark.domain.model import CustodyStage, Product

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

product_table = Table(
    "product",
    mapper_registry.metadata,
    Column("product_id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("origin", String, nullable=False, default=""),
    Column("manufacturer", String, nullable=False, default=""),
    Column("certification_hash", String, nullable=False, default=""),
    Column("blockchain_ref_hash", String, nullable=False, default=""),
    Column("created_by_wallet", String, nullable=True),
    Column("cert_file", String, nullable=True),
    Column("image_file", String, nullable=True),
    Column("created_at", UTCDateTime, nullable=False),
    Index("ix_product_certification_hash", "certification_hash"),
    Index("ix_product_blockchain_ref_hash", "blockchain_ref_hash"),
)

# Stage order is the insertion order of ``seq``; rows are only ever inserted.
product_stage_table = Table(
    "product_stage",
    mapper_registry.metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column(
        "product_id",
        String,
        ForeignKey("product.product_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("label", String, nullable=False),
    Column("recorded_at", UTCDateTime, nullable=False),
    Index("ix_product_stage_product_id_seq", "product_id", "seq"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(CustodyStage, product_stage_table)

    mapper_registry.map_imperatively(
        Product,
        product_table,
        properties={
            "_stages": relationship(
                CustodyStage,
                order_by=product_stage_table.c.seq,
                lazy="selectin",
                cascade="all, delete-orphan",
            ),
        },
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
