"""Catalog entries and the transaction records that reference them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal


type EntryId = int
type RecordId = int
type ScopeId = int


@dataclass(frozen=True, slots=True, kw_only=True)
class CatalogEntry:
    """A service offering with a display label and an optional price.

    Labels are meant to be unique within a scope, but imported data may carry
    duplicates that differ only in casing or whitespace.
    """

    id: EntryId
    label: str
    price: Decimal | None = None
    scope_id: ScopeId | None = None
    duration_minutes: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TransactionRecord:
    """A booked appointment that should point at one catalog entry."""

    id: RecordId
    title: str | None = None
    linked_entry_id: EntryId | None = None
    scope_id: ScopeId | None = None
    client_id: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
