"""Factories for catalog entries and appointment records used across tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from clinicrecon.adapters.sqlalchemy.repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyTransactionRepository,
)
from clinicrecon.domain.model import CatalogEntry, TransactionRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

DEFAULT_SCOPE = 2


def make_entry(
    entry_id: int,
    label: str,
    price: str | int | None = None,
    *,
    scope_id: int | None = DEFAULT_SCOPE,
) -> CatalogEntry:
    return CatalogEntry(
        id=entry_id,
        label=label,
        price=Decimal(price) if price is not None else None,
        scope_id=scope_id,
    )


def make_record(
    record_id: int,
    title: str | None,
    linked_entry_id: int | None = None,
    *,
    scope_id: int | None = DEFAULT_SCOPE,
    client_id: int | None = None,
    start_time: datetime | None = None,
    duration: timedelta = timedelta(minutes=60),
) -> TransactionRecord:
    return TransactionRecord(
        id=record_id,
        title=title,
        linked_entry_id=linked_entry_id,
        scope_id=scope_id,
        client_id=client_id,
        start_time=start_time,
        end_time=start_time + duration if start_time is not None else None,
    )


def at(hour: int, minute: int = 0, *, day: int = 3) -> datetime:
    return datetime(2025, 3, day, hour, minute, tzinfo=UTC)


def seed(
    session: Session,
    *,
    entries: Iterable[CatalogEntry] = (),
    records: Iterable[TransactionRecord] = (),
) -> None:
    """Insert rows through the repositories and commit."""

    catalog = SqlAlchemyCatalogRepository(session)
    for entry in entries:
        catalog.add(entry)
    transactions = SqlAlchemyTransactionRepository(session)
    for record in records:
        transactions.add(record)
    session.commit()
