"""SQLAlchemy adapter package for chainmark."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    mapper_registry,
    product_stage_table,
    product_table,
    start_mappers,
)
from .repositories import SqlAlchemyProductRepository
from .unit_of_work import (
    SqlAlchemyProvenanceUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyProductRepository",
    "SqlAlchemyProvenanceUnitOfWork",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "product_stage_table",
    "product_table",
    "shutdown",
    "start_mappers",
    "startup",
]
