"""Link transaction records to canonical catalog entries.

Responsibilities of this stage:
- index canonical entries by scope and normalized label, refusing ambiguous keys
- classify each record as linked, already linked, unmatched or invalid
- never write anything; callers apply ``LinkReport.assignments`` in one batch
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from .errors import AmbiguousCanonicalMappingError
from .normalize import normalize_label

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from clinicrecon.domain.model import (
        CatalogEntry,
        EntryId,
        RecordId,
        ScopeId,
        TransactionRecord,
    )

    from .deduplicate import ScopedLabel


log = logging.getLogger(__name__)


class LinkStatus(StrEnum):
    """Per-record outcome of the linking pass."""

    LINKED = "linked"
    ALREADY_LINKED = "already_linked"
    UNMATCHED = "unmatched"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkOutcome:
    record_id: RecordId
    status: LinkStatus
    entry_id: EntryId | None = None
    previous_entry_id: EntryId | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class LinkReport:
    """Outcomes of one linking pass, in record input order."""

    outcomes: tuple[LinkOutcome, ...] = ()

    @property
    def counts(self) -> dict[LinkStatus, int]:
        counter = Counter(outcome.status for outcome in self.outcomes)
        return {status: counter.get(status, 0) for status in LinkStatus}

    @property
    def assignments(self) -> dict[RecordId, EntryId]:
        """New ``linked_entry_id`` values for every ``LINKED`` outcome."""

        return {
            outcome.record_id: outcome.entry_id
            for outcome in self.outcomes
            if outcome.status is LinkStatus.LINKED and outcome.entry_id is not None
        }

    def by_status(self, status: LinkStatus) -> tuple[LinkOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if outcome.status is status)


class LinkRecords(Protocol):
    """Link records against a canonical catalog."""

    def __call__(
        self,
        canonical_entries: Iterable[CatalogEntry],
        records: Iterable[TransactionRecord],
        *,
        redirects: Mapping[EntryId, EntryId] | None = None,
    ) -> LinkReport: ...


def build_label_index(canonical_entries: Iterable[CatalogEntry]) -> dict[ScopedLabel, EntryId]:
    """Map ``(scope_id, normalized label)`` to canonical entry ids.

    Raises ``AmbiguousCanonicalMappingError`` if two entries of one scope share
    a key.
    """

    index: dict[ScopedLabel, EntryId] = {}
    for entry in canonical_entries:
        key = normalize_label(entry.label)
        if not key:
            continue
        existing = index.get((entry.scope_id, key))
        if existing is not None and existing != entry.id:
            raise AmbiguousCanonicalMappingError(
                key=key, entry_ids=tuple(sorted((existing, entry.id)))
            )
        index[(entry.scope_id, key)] = entry.id
    return index


def link_records(
    canonical_entries: Iterable[CatalogEntry],
    records: Iterable[TransactionRecord],
    *,
    redirects: Mapping[EntryId, EntryId] | None = None,
) -> LinkReport:
    """Classify every record against the canonical label index of its scope.

    ``redirects`` maps superseded entry ids to their canonical ids. A record
    whose title matches nothing but which still points at a superseded entry
    is moved to that entry's canonical.
    """

    catalog = list(canonical_entries)
    index = build_label_index(catalog)
    scope_by_entry = {entry.id: entry.scope_id for entry in catalog}
    outcomes = [
        _outcome_for(record, index, scope_by_entry, redirects or {}) for record in records
    ]
    report = LinkReport(outcomes=tuple(outcomes))
    log.info(
        "Linked records: %s",
        ", ".join(f"{status}={count}" for status, count in report.counts.items()),
    )
    return report


def _outcome_for(
    record: TransactionRecord,
    index: Mapping[ScopedLabel, EntryId],
    scope_by_entry: Mapping[EntryId, ScopeId | None],
    redirects: Mapping[EntryId, EntryId],
) -> LinkOutcome:
    problem = _validation_problem(record)
    if problem is not None:
        log.warning("Skipping invalid record %r: %s", record.id, problem)
        return LinkOutcome(
            record_id=record.id,
            status=LinkStatus.INVALID,
            previous_entry_id=record.linked_entry_id,
            reason=problem,
        )

    current = record.linked_entry_id
    key = normalize_label(record.title)
    match = index.get((record.scope_id, key)) if key else None

    if match is None:
        redirected = redirects.get(current) if current is not None else None
        if (
            redirected is not None
            and redirected != current
            and scope_by_entry.get(redirected, record.scope_id) == record.scope_id
        ):
            return LinkOutcome(
                record_id=record.id,
                status=LinkStatus.LINKED,
                entry_id=redirected,
                previous_entry_id=current,
                reason="superseded",
            )
        return LinkOutcome(
            record_id=record.id,
            status=LinkStatus.UNMATCHED,
            previous_entry_id=current,
            reason=_unmatched_reason(record, key, scope_by_entry, redirects),
        )

    if current == match:
        return LinkOutcome(
            record_id=record.id,
            status=LinkStatus.ALREADY_LINKED,
            entry_id=match,
            previous_entry_id=current,
        )
    return LinkOutcome(
        record_id=record.id,
        status=LinkStatus.LINKED,
        entry_id=match,
        previous_entry_id=current,
        reason="unlinked" if current is None else "relinked",
    )


def _unmatched_reason(
    record: TransactionRecord,
    key: str,
    scope_by_entry: Mapping[EntryId, ScopeId | None],
    redirects: Mapping[EntryId, EntryId],
) -> str:
    current = record.linked_entry_id
    if current is not None:
        target = redirects.get(current, current)
        if target not in scope_by_entry:
            return "unknown_entry"
        if scope_by_entry[target] != record.scope_id:
            return "foreign_entry"
    return "blank_title" if not key else "no_matching_label"


def _validation_problem(record: TransactionRecord) -> str | None:
    if not _is_valid_id(record.id):
        return "malformed_id"
    if record.title is not None and not isinstance(record.title, str):
        return "malformed_title"
    if record.linked_entry_id is not None and not _is_valid_id(record.linked_entry_id):
        return "malformed_linked_entry_id"
    return None


def _is_valid_id(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def apply_link_outcomes(
    records: Iterable[TransactionRecord],
    outcomes: Sequence[LinkOutcome],
) -> list[TransactionRecord]:
    """Return records with every ``LINKED`` outcome applied."""

    assignments = LinkReport(outcomes=tuple(outcomes)).assignments
    return [
        replace(record, linked_entry_id=assignments[record.id])
        if record.id in assignments
        else record
        for record in records
    ]
