"""Catalog reconciliation: duplicate resolution and record linking.

Flow:
1) normalize labels into comparison keys
2) collapse duplicate catalog entries under a canonical policy
3) link transaction records to the canonical entries
"""

from __future__ import annotations

from .deduplicate import (
    DuplicateGroup,
    DuplicateResolution,
    RecordDuplicates,
    find_duplicate_records,
    resolve_duplicates,
)
from .engine import ReconciliationEngine, ReconciliationResult, reconcile
from .errors import AmbiguousCanonicalMappingError, ReconciliationError, UnknownPolicyError
from .link import (
    LinkOutcome,
    LinkReport,
    LinkStatus,
    apply_link_outcomes,
    build_label_index,
    link_records,
)
from .normalize import normalize_label
from .policy import CanonicalPolicy, highest_price_policy, lowest_id_policy, policy_by_name

__all__ = [
    "AmbiguousCanonicalMappingError",
    "CanonicalPolicy",
    "DuplicateGroup",
    "DuplicateResolution",
    "LinkOutcome",
    "LinkReport",
    "LinkStatus",
    "ReconciliationEngine",
    "ReconciliationError",
    "ReconciliationResult",
    "RecordDuplicates",
    "UnknownPolicyError",
    "apply_link_outcomes",
    "build_label_index",
    "find_duplicate_records",
    "highest_price_policy",
    "link_records",
    "lowest_id_policy",
    "normalize_label",
    "policy_by_name",
    "reconcile",
    "resolve_duplicates",
]
