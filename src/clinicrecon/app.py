"""Application orchestration entry points.

Every operation loads one scope into memory, runs the pure domain stages and
only writes when ``apply`` is set.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from clinicrecon.adapters.snapshot import RejectedRow, load_snapshot
from clinicrecon.adapters.sqlalchemy import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from clinicrecon.domain.reconciliation import (
    LinkStatus,
    ReconciliationEngine,
    find_duplicate_records,
    highest_price_policy,
)
from clinicrecon.domain.time_shift import shift_timestamps

if TYPE_CHECKING:
    from pathlib import Path

    from clinicrecon.domain.model import EntryId, RecordId, ScopeId
    from clinicrecon.domain.ports.unit_of_work import ReconciliationUnitOfWork
    from clinicrecon.domain.reconciliation import (
        CanonicalPolicy,
        ReconciliationResult,
        RecordDuplicates,
    )
    from clinicrecon.domain.time_shift import TimestampShift

type UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class ServiceReconciliationSummary:
    """Outcome of a catalog deduplication and appointment linking run."""

    result: ReconciliationResult
    applied: bool
    links_written: int = 0
    entries_deleted: int = 0
    rejected: tuple[RejectedRow, ...] = ()

    @property
    def superseded(self) -> tuple[EntryId, ...]:
        return self.result.duplicates.superseded


@dataclass(slots=True)
class TimeCorrectionSummary:
    shift: TimestampShift
    selected: int
    applied: bool
    updated: int = 0


@dataclass(slots=True)
class AppointmentDuplicatesSummary:
    duplicates: RecordDuplicates
    applied: bool
    deleted: int = 0
    superseded: tuple[RecordId, ...] = ()


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyReconciliationUnitOfWork


def reconcile_services(
    scope_id: ScopeId | None,
    *,
    policy: CanonicalPolicy = highest_price_policy,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    apply: bool = False,
    delete_superseded: bool = False,
) -> ServiceReconciliationSummary:
    """Collapse duplicate service types and link appointments to survivors.

    Superseded entries are only deleted when both ``apply`` and
    ``delete_superseded`` are set, after appointments were re-pointed.
    """

    if delete_superseded and not apply:
        raise ValueError("Deleting superseded entries requires apply=True")

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    engine = ReconciliationEngine.with_policy(policy)
    log.info("Starting service reconciliation: scope=%s, apply=%s", scope_id, apply)

    with effective_uow() as uow:
        entries = uow.repositories.catalog.list_entries(scope_id)
        records = uow.repositories.transactions.list_records(scope_id)
        result = engine.reconcile(entries, records)
        summary = ServiceReconciliationSummary(result=result, applied=apply)

        if apply:
            summary.links_written = uow.repositories.transactions.assign_links(
                result.links.assignments
            )
            if delete_superseded:
                summary.entries_deleted = uow.repositories.catalog.delete_entries(
                    result.duplicates.superseded
                )
            uow.commit()

    counts = result.links.counts
    log.info(
        "Finished service reconciliation: superseded=%s, linked=%s, already_linked=%s, "
        "unmatched=%s, invalid=%s, written=%s, deleted=%s",
        len(summary.superseded),
        counts[LinkStatus.LINKED],
        counts[LinkStatus.ALREADY_LINKED],
        counts[LinkStatus.UNMATCHED],
        counts[LinkStatus.INVALID],
        summary.links_written,
        summary.entries_deleted,
    )
    return summary


def reconcile_snapshot(
    path: Path,
    *,
    scope_id: ScopeId | None = None,
    policy: CanonicalPolicy = highest_price_policy,
) -> ServiceReconciliationSummary:
    """Dry-run reconciliation over an exported JSON snapshot."""

    snapshot = load_snapshot(path, scope_id=scope_id)
    result = ReconciliationEngine.with_policy(policy).reconcile(
        snapshot.entries, snapshot.records
    )
    log.info(
        "Snapshot %s: %s entries, %s records, %s rejected rows",
        path,
        len(snapshot.entries),
        len(snapshot.records),
        len(snapshot.rejected),
    )
    return ServiceReconciliationSummary(result=result, applied=False, rejected=snapshot.rejected)


def correct_appointment_times(
    scope_id: ScopeId | None,
    *,
    shift: TimestampShift,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    apply: bool = False,
) -> TimeCorrectionSummary:
    """Move appointment start/end times by a fixed offset.

    Undo a previous run by passing ``shift.inverse()``.
    """

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    log.info(
        "Shifting appointment times %s by %s: scope=%s, apply=%s",
        shift.direction,
        shift.offset,
        scope_id,
        apply,
    )
    with effective_uow() as uow:
        records = uow.repositories.transactions.list_records(scope_id)
        shifted = shift_timestamps(records, shift, scope_id=scope_id)
        summary = TimeCorrectionSummary(shift=shift, selected=len(shifted), applied=apply)
        if apply:
            summary.updated = uow.repositories.transactions.update_times(shifted)
            uow.commit()

    log.info("Shifted %s of %s selected appointments", summary.updated, summary.selected)
    return summary


def remove_duplicate_appointments(
    scope_id: ScopeId | None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    apply: bool = False,
) -> AppointmentDuplicatesSummary:
    """Report (and with ``apply`` delete) appointments booked twice."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        records = uow.repositories.transactions.list_records(scope_id)
        duplicates = find_duplicate_records(records)
        summary = AppointmentDuplicatesSummary(
            duplicates=duplicates,
            applied=apply,
            superseded=duplicates.superseded,
        )
        if apply and duplicates.superseded:
            summary.deleted = uow.repositories.transactions.delete_records(
                duplicates.superseded
            )
            uow.commit()

    log.info(
        "Duplicate appointments: found=%s, deleted=%s (scope=%s)",
        len(summary.superseded),
        summary.deleted,
        scope_id,
    )
    return summary
