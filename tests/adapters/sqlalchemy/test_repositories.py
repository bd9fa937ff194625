from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from clinicrecon.adapters.sqlalchemy import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyTransactionRepository,
)
from clinicrecon.domain.ports import CatalogRepository, TransactionRepository
from clinicrecon.domain.time_shift import ShiftDirection, TimestampShift, shift_timestamps
from tests.helpers.catalog import at, make_entry, make_record, seed

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def test_repositories_satisfy_ports(sqlite_session: Session) -> None:
    assert isinstance(SqlAlchemyCatalogRepository(sqlite_session), CatalogRepository)
    assert isinstance(SqlAlchemyTransactionRepository(sqlite_session), TransactionRepository)


def test_list_entries_filters_by_scope_and_orders_by_id(sqlite_session: Session) -> None:
    seed(
        sqlite_session,
        entries=[
            make_entry(12, "Sauna", "350.00"),
            make_entry(3, "Massage 60min", "650.50"),
            make_entry(7, "Yoga", None, scope_id=9),
        ],
    )
    repo = SqlAlchemyCatalogRepository(sqlite_session)

    entries = repo.list_entries(2)

    assert [entry.id for entry in entries] == [3, 12]
    assert entries[0].label == "Massage 60min"
    assert entries[0].price == Decimal("650.50")
    assert entries[0].scope_id == 2
    assert [entry.id for entry in repo.list_entries()] == [3, 7, 12]


def test_delete_entries_removes_only_given_ids(sqlite_session: Session) -> None:
    seed(sqlite_session, entries=[make_entry(1, "A"), make_entry(2, "a"), make_entry(3, "B")])
    repo = SqlAlchemyCatalogRepository(sqlite_session)

    deleted = repo.delete_entries([2, 2])
    sqlite_session.commit()

    assert deleted == 1
    assert [entry.id for entry in repo.list_entries()] == [1, 3]
    assert repo.delete_entries([]) == 0


def test_list_records_round_trips_fields(sqlite_session: Session) -> None:
    seed(
        sqlite_session,
        records=[make_record(100, "Massage", 10, client_id=5, start_time=at(9, 45))],
    )
    repo = SqlAlchemyTransactionRepository(sqlite_session)

    (record,) = repo.list_records(2)

    assert record.id == 100
    assert record.title == "Massage"
    assert record.linked_entry_id == 10
    assert record.client_id == 5
    assert record.start_time == at(9, 45)
    assert record.end_time == at(10, 45)


def test_assign_links_updates_in_one_batch(sqlite_session: Session) -> None:
    seed(
        sqlite_session,
        entries=[make_entry(10, "Massage"), make_entry(11, "Sauna")],
        records=[make_record(1, "massage"), make_record(2, "sauna", 10), make_record(3, "Yoga")],
    )
    repo = SqlAlchemyTransactionRepository(sqlite_session)

    written = repo.assign_links({1: 10, 2: 11})
    sqlite_session.commit()

    assert written == 2
    assert {r.id: r.linked_entry_id for r in repo.list_records()} == {1: 10, 2: 11, 3: None}
    assert repo.assign_links({}) == 0


def test_update_times_persists_shifted_records(sqlite_session: Session) -> None:
    seed(
        sqlite_session,
        records=[make_record(1, "Yoga", start_time=at(9)), make_record(2, "Yoga")],
    )
    repo = SqlAlchemyTransactionRepository(sqlite_session)
    shift = TimestampShift.hours(2, ShiftDirection.BACKWARD)

    updated = repo.update_times(shift_timestamps(repo.list_records(), shift))
    sqlite_session.commit()

    assert updated == 2
    first, second = repo.list_records()
    assert (first.start_time, first.end_time) == (at(7), at(8))
    assert (second.start_time, second.end_time) == (None, None)


def test_delete_records(sqlite_session: Session) -> None:
    seed(sqlite_session, records=[make_record(1, "Yoga"), make_record(2, "Yoga")])
    repo = SqlAlchemyTransactionRepository(sqlite_session)

    assert repo.delete_records([2]) == 1
    sqlite_session.commit()

    assert [record.id for record in repo.list_records()] == [1]
