"""Orchestrator for the reconciliation subsystem.

The engine composes stage callables but does not know where entries and
records come from or how outcomes are persisted. Swap ``resolve`` to change
the canonical policy, or ``link`` to change matching.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING

from .deduplicate import resolve_duplicates
from .link import link_records
from .policy import highest_price_policy

if TYPE_CHECKING:
    from collections.abc import Iterable

    from clinicrecon.domain.model import CatalogEntry, TransactionRecord

    from .deduplicate import DuplicateResolution, ResolveDuplicates
    from .link import LinkRecords, LinkReport
    from .policy import CanonicalPolicy


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    duplicates: DuplicateResolution
    links: LinkReport


@dataclass(slots=True)
class ReconciliationEngine:
    """Run duplicate resolution followed by linking against the survivors."""

    resolve: ResolveDuplicates = field(default=resolve_duplicates)
    link: LinkRecords = field(default=link_records)

    @classmethod
    def with_policy(cls, policy: CanonicalPolicy) -> ReconciliationEngine:
        return cls(resolve=partial(resolve_duplicates, policy=policy))

    def reconcile(
        self,
        entries: Iterable[CatalogEntry],
        records: Iterable[TransactionRecord],
    ) -> ReconciliationResult:
        """Run both stages over one in-memory snapshot."""

        catalog = list(entries)
        duplicates = self.resolve(catalog)
        canonical = duplicates.canonical_entries(catalog)
        log.info(
            "Catalog: %s entries, %s canonical, %s superseded",
            len(catalog),
            len(canonical),
            len(duplicates.superseded),
        )
        links = self.link(canonical, records, redirects=duplicates.canonical_by_entry)
        return ReconciliationResult(duplicates=duplicates, links=links)


def reconcile(
    entries: Iterable[CatalogEntry],
    records: Iterable[TransactionRecord],
    *,
    policy: CanonicalPolicy = highest_price_policy,
) -> ReconciliationResult:
    return ReconciliationEngine.with_policy(policy).reconcile(entries, records)
