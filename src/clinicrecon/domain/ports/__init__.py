"""Persistence ports consumed by the application services."""

from __future__ import annotations

from .persistence import CatalogRepository, TransactionRepository
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "RepositoryCollection",
    "TransactionRepository",
    "UnitOfWork",
]
