"""Duplicate detection for catalog entries and transaction records.

Responsibilities of this stage:
- group catalog entries by scope and normalized label, one canonical per group
- report superseded entries without deleting anything
- flag transaction records booked twice for the same client and slot in a scope

Deletion of anything reported here is a separate, reviewed caller action.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .normalize import normalize_label
from .policy import highest_price_policy

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from clinicrecon.domain.model import (
        CatalogEntry,
        EntryId,
        RecordId,
        ScopeId,
        TransactionRecord,
    )

    from .policy import CanonicalPolicy


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """One equivalence class with more than one member."""

    key: str
    canonical_id: EntryId
    superseded_ids: tuple[EntryId, ...]
    scope_id: ScopeId | None = None


@dataclass(slots=True)
class DuplicateResolution:
    """Result of catalog duplicate resolution."""

    canonical_by_entry: dict[EntryId, EntryId] = field(default_factory=dict["EntryId", "EntryId"])
    groups: tuple[DuplicateGroup, ...] = ()

    @property
    def superseded(self) -> tuple[EntryId, ...]:
        return tuple(
            sorted(entry_id for group in self.groups for entry_id in group.superseded_ids)
        )

    def canonical_for(self, entry_id: EntryId) -> EntryId:
        return self.canonical_by_entry.get(entry_id, entry_id)

    def is_canonical(self, entry_id: EntryId) -> bool:
        return self.canonical_for(entry_id) == entry_id

    def canonical_entries(self, entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
        """Return the surviving entries, preserving input order."""

        return [entry for entry in entries if self.is_canonical(entry.id)]


class ResolveDuplicates(Protocol):
    """Collapse duplicate catalog entries."""

    def __call__(self, entries: Iterable[CatalogEntry]) -> DuplicateResolution: ...


def resolve_duplicates(
    entries: Iterable[CatalogEntry],
    *,
    policy: CanonicalPolicy = highest_price_policy,
) -> DuplicateResolution:
    """Group entries by scope and normalized label and pick one canonical per group.

    Entries of different scopes never share a group, even when their labels
    match.
    """

    classes: dict[ScopedLabel, list[CatalogEntry]] = defaultdict(list)
    canonical_by_entry: dict[EntryId, EntryId] = {}
    for entry in entries:
        canonical_by_entry[entry.id] = entry.id
        key = normalize_label(entry.label)
        if not key:
            log.warning("Catalog entry %s has a blank label; leaving it untouched", entry.id)
            continue
        classes[(entry.scope_id, key)].append(entry)

    groups: list[DuplicateGroup] = []
    for scope_id, key in sorted(classes, key=_scoped_label_order):
        members = classes[(scope_id, key)]
        if len(members) < 2:
            continue
        ranked = sorted(members, key=policy)
        canonical = ranked[0]
        superseded = tuple(sorted({member.id for member in ranked[1:]} - {canonical.id}))
        for member in members:
            canonical_by_entry[member.id] = canonical.id
        if not superseded:
            # the same id listed twice is not a duplicate class
            continue
        groups.append(
            DuplicateGroup(
                key=key,
                canonical_id=canonical.id,
                superseded_ids=superseded,
                scope_id=scope_id,
            )
        )
        log.debug(
            "Duplicate label %r in scope %s: keep %s, supersede %s",
            key,
            scope_id,
            canonical.id,
            superseded,
        )

    return DuplicateResolution(canonical_by_entry=canonical_by_entry, groups=tuple(groups))


type ScopedLabel = tuple[ScopeId | None, str]


def _scoped_label_order(item: ScopedLabel) -> tuple[bool, int, str]:
    scope_id, key = item
    return (scope_id is None, scope_id or 0, key)


type RecordSlot = tuple[ScopeId | None, str, datetime, int]


@dataclass(slots=True)
class RecordDuplicates:
    """Transaction records booked more than once; the lowest id survives."""

    survivor_by_record: dict[RecordId, RecordId] = field(
        default_factory=dict["RecordId", "RecordId"]
    )

    @property
    def superseded(self) -> tuple[RecordId, ...]:
        return tuple(sorted(self.survivor_by_record))

    @property
    def survivors(self) -> tuple[RecordId, ...]:
        return tuple(sorted(set(self.survivor_by_record.values())))


def find_duplicate_records(records: Iterable[TransactionRecord]) -> RecordDuplicates:
    """Find records sharing scope, title, start time and client.

    Titles compare exactly (no normalization) and a missing client id counts
    as client ``0``. Records without a title or start time are never grouped.
    """

    lowest_by_slot: dict[RecordSlot, RecordId] = {}
    members_by_slot: dict[RecordSlot, list[RecordId]] = defaultdict(list)
    for record in records:
        if record.title is None or record.start_time is None:
            continue
        slot: RecordSlot = (
            record.scope_id,
            record.title,
            record.start_time,
            record.client_id or 0,
        )
        members_by_slot[slot].append(record.id)
        current = lowest_by_slot.get(slot)
        if current is None or record.id < current:
            lowest_by_slot[slot] = record.id

    survivor_by_record: dict[RecordId, RecordId] = {}
    for slot, members in members_by_slot.items():
        survivor = lowest_by_slot[slot]
        for record_id in members:
            if record_id != survivor:
                survivor_by_record[record_id] = survivor
    return RecordDuplicates(survivor_by_record=survivor_by_record)
