"""Repository implementations backed by SQLAlchemy sessions.

Reads return frozen domain objects built from rows; writes are set-based
statements so a whole batch goes out in one round trip.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import bindparam, delete, select, update

from clinicrecon.adapters.sqlalchemy.tables import appointments_table, service_types_table
from clinicrecon.domain.model import CatalogEntry, TransactionRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from sqlalchemy import Row
    from sqlalchemy.orm import Session

    from clinicrecon.domain.model import EntryId, RecordId, ScopeId


class SqlAlchemyCatalogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_entries(self, scope_id: ScopeId | None = None) -> Sequence[CatalogEntry]:
        stmt = select(service_types_table).order_by(service_types_table.c.id)
        if scope_id is not None:
            stmt = stmt.where(service_types_table.c.tenant_id == scope_id)
        return [_entry_from_row(row) for row in self.session.execute(stmt)]

    def add(self, entry: CatalogEntry) -> None:
        self.session.execute(
            service_types_table.insert().values(
                id=entry.id,
                tenant_id=entry.scope_id,
                name=entry.label,
                price=entry.price,
                duration_minutes=entry.duration_minutes,
            )
        )

    def delete_entries(self, entry_ids: Iterable[EntryId]) -> int:
        ids = sorted(set(entry_ids))
        if not ids:
            return 0
        stmt = delete(service_types_table).where(service_types_table.c.id.in_(ids))
        return self.session.execute(stmt).rowcount


class SqlAlchemyTransactionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_records(self, scope_id: ScopeId | None = None) -> Sequence[TransactionRecord]:
        stmt = select(appointments_table).order_by(appointments_table.c.id)
        if scope_id is not None:
            stmt = stmt.where(appointments_table.c.tenant_id == scope_id)
        return [_record_from_row(row) for row in self.session.execute(stmt)]

    def add(self, record: TransactionRecord) -> None:
        self.session.execute(
            appointments_table.insert().values(
                id=record.id,
                tenant_id=record.scope_id,
                title=record.title,
                service_type_id=record.linked_entry_id,
                client_id=record.client_id,
                start_time=record.start_time,
                end_time=record.end_time,
            )
        )

    def assign_links(self, assignments: Mapping[RecordId, EntryId]) -> int:
        params = [
            {"b_record_id": record_id, "b_entry_id": entry_id}
            for record_id, entry_id in sorted(assignments.items())
        ]
        if not params:
            return 0
        stmt = (
            update(appointments_table)
            .where(appointments_table.c.id == bindparam("b_record_id"))
            .values(service_type_id=bindparam("b_entry_id"))
        )
        self.session.execute(stmt, params)
        return len(params)

    def update_times(self, records: Iterable[TransactionRecord]) -> int:
        params = [
            {"b_record_id": record.id, "b_start": record.start_time, "b_end": record.end_time}
            for record in records
        ]
        if not params:
            return 0
        stmt = (
            update(appointments_table)
            .where(appointments_table.c.id == bindparam("b_record_id"))
            .values(start_time=bindparam("b_start"), end_time=bindparam("b_end"))
        )
        self.session.execute(stmt, params)
        return len(params)

    def delete_records(self, record_ids: Iterable[RecordId]) -> int:
        ids = sorted(set(record_ids))
        if not ids:
            return 0
        stmt = delete(appointments_table).where(appointments_table.c.id.in_(ids))
        return self.session.execute(stmt).rowcount


def _entry_from_row(row: Row[Any]) -> CatalogEntry:
    return CatalogEntry(
        id=row.id,
        label=row.name,
        price=row.price,
        scope_id=row.tenant_id,
        duration_minutes=row.duration_minutes,
    )


def _record_from_row(row: Row[Any]) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        title=row.title,
        linked_entry_id=row.service_type_id,
        scope_id=row.tenant_id,
        client_id=row.client_id,
        start_time=row.start_time,
        end_time=row.end_time,
    )
