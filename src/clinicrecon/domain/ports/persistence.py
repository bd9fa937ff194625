"""Ports for reading and repairing the catalog and transaction stores."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from clinicrecon.domain.model import (
        CatalogEntry,
        EntryId,
        RecordId,
        ScopeId,
        TransactionRecord,
    )


@runtime_checkable
class CatalogRepository(Protocol):
    """Persistence contract for service catalog entries."""

    def list_entries(self, scope_id: ScopeId | None = None) -> Sequence[CatalogEntry]: ...

    def delete_entries(self, entry_ids: Iterable[EntryId]) -> int: ...


@runtime_checkable
class TransactionRepository(Protocol):
    """Persistence contract for appointments."""

    def list_records(self, scope_id: ScopeId | None = None) -> Sequence[TransactionRecord]: ...

    def assign_links(self, assignments: Mapping[RecordId, EntryId]) -> int: ...

    def update_times(self, records: Iterable[TransactionRecord]) -> int: ...

    def delete_records(self, record_ids: Iterable[RecordId]) -> int: ...
