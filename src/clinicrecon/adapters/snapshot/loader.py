"""Load an exported JSON snapshot of the catalog and appointments.

The document looks like ``{"service_types": [...], "appointments": [...]}``
with one object per table row. Rows that fail validation are reported as
``RejectedRow`` and left out; they never abort the load.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from pydantic import ValidationError

from clinicrecon.domain.model import CatalogEntry, TransactionRecord

from .schema import AppointmentRow, ServiceTypeRow, SnapshotDocument

if TYPE_CHECKING:
    from pathlib import Path

    from clinicrecon.domain.model import ScopeId

log = logging.getLogger(__name__)

type RowKind = Literal["service_type", "appointment"]


class SnapshotFormatError(ValueError):
    """Raised when the snapshot document itself is unreadable."""


@dataclass(frozen=True, slots=True)
class RejectedRow:
    kind: RowKind
    index: int
    reason: str


@dataclass(frozen=True, slots=True)
class Snapshot:
    entries: tuple[CatalogEntry, ...] = ()
    records: tuple[TransactionRecord, ...] = ()
    rejected: tuple[RejectedRow, ...] = ()


def parse_snapshot(payload: object, *, scope_id: ScopeId | None = None) -> Snapshot:
    """Validate a decoded snapshot document.

    When ``scope_id`` is given, rows from other tenants are dropped.
    """

    try:
        document = SnapshotDocument.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotFormatError(f"Invalid snapshot document: {exc}") from exc

    entries: list[CatalogEntry] = []
    records: list[TransactionRecord] = []
    rejected: list[RejectedRow] = []

    for index, raw in enumerate(document.service_types):
        try:
            service = ServiceTypeRow.model_validate(raw)
        except ValidationError as exc:
            rejected.append(RejectedRow(kind="service_type", index=index, reason=_reason(exc)))
            continue
        if scope_id is not None and service.tenant_id != scope_id:
            continue
        entries.append(
            CatalogEntry(
                id=service.id,
                label=service.name,
                price=service.price,
                scope_id=service.tenant_id,
                duration_minutes=service.duration_minutes,
            )
        )

    for index, raw in enumerate(document.appointments):
        try:
            appointment = AppointmentRow.model_validate(raw)
        except ValidationError as exc:
            rejected.append(RejectedRow(kind="appointment", index=index, reason=_reason(exc)))
            continue
        if scope_id is not None and appointment.tenant_id != scope_id:
            continue
        records.append(
            TransactionRecord(
                id=appointment.id,
                title=appointment.title,
                linked_entry_id=appointment.service_type_id,
                scope_id=appointment.tenant_id,
                client_id=appointment.client_id,
                start_time=appointment.start_time,
                end_time=appointment.end_time,
            )
        )

    for rejection in rejected:
        log.warning(
            "Rejected %s row %s: %s", rejection.kind, rejection.index, rejection.reason
        )

    return Snapshot(entries=tuple(entries), records=tuple(records), rejected=tuple(rejected))


def load_snapshot(path: Path, *, scope_id: ScopeId | None = None) -> Snapshot:
    try:
        with path.open(encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SnapshotFormatError(f"{path} is not valid JSON: {exc}") from exc
    return parse_snapshot(payload, scope_id=scope_id)


def _reason(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'row'}: {error['msg']}"
        for error in exc.errors()
    )
