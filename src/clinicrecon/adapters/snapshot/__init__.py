"""JSON snapshot adapter for offline dry runs."""

from __future__ import annotations

from .loader import RejectedRow, Snapshot, SnapshotFormatError, load_snapshot, parse_snapshot

__all__ = ["RejectedRow", "Snapshot", "SnapshotFormatError", "load_snapshot", "parse_snapshot"]
