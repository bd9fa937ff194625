"""Domain layer: entities, reconciliation stages and persistence ports."""

from __future__ import annotations

from .model import CatalogEntry, EntryId, RecordId, ScopeId, TransactionRecord

__all__ = ["CatalogEntry", "EntryId", "RecordId", "ScopeId", "TransactionRecord"]
