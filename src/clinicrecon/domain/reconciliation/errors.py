"""Errors raised by the reconciliation stages."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clinicrecon.domain.model import EntryId


class ReconciliationError(Exception):
    """Base class for structural reconciliation failures."""


class AmbiguousCanonicalMappingError(ReconciliationError):
    """Raised when two canonical entries share one normalized label.

    This means duplicate resolution did not run (or is broken); linking refuses
    to pick one of them.
    """

    def __init__(self, *, key: str, entry_ids: tuple[EntryId, ...]) -> None:
        self.key = key
        self.entry_ids = entry_ids
        ids = ", ".join(str(entry_id) for entry_id in entry_ids)
        super().__init__(f"Canonical entries {ids} share the normalized label {key!r}")


class UnknownPolicyError(ValueError):
    """Raised when a canonical policy name is not registered."""
