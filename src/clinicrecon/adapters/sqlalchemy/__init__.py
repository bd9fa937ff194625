"""SQLAlchemy adapter package for clinicrecon."""

from __future__ import annotations

from .repositories import SqlAlchemyCatalogRepository, SqlAlchemyTransactionRepository
from .tables import appointments_table, create_all_tables, metadata, service_types_table
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "SqlAlchemyTransactionRepository",
    "StartupError",
    "appointments_table",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "service_types_table",
    "shutdown",
    "startup",
]
