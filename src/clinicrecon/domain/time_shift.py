"""Fixed-offset correction for records stored under the wrong timezone.

Imports that treated local clinic times as UTC end up shifted by the local
offset. A ``TimestampShift`` moves start and end times by a fixed duration and
its ``inverse()`` restores them exactly, so a bad correction can be undone.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from clinicrecon.domain.model import ScopeId, TransactionRecord


class InvalidShiftError(ValueError):
    """Raised when a shift is constructed with a negative offset."""


class ShiftDirection(StrEnum):
    FORWARD = "forward"
    BACKWARD = "backward"

    def inverse(self) -> ShiftDirection:
        return ShiftDirection.BACKWARD if self is ShiftDirection.FORWARD else ShiftDirection.FORWARD


@dataclass(frozen=True, slots=True)
class TimestampShift:
    """Describe a fixed-duration move; the sign lives in ``direction``."""

    offset: timedelta
    direction: ShiftDirection

    def __post_init__(self) -> None:
        if self.offset < timedelta(0):
            raise InvalidShiftError("Shift offset must be non-negative; use direction instead")

    @classmethod
    def hours(cls, hours: float, direction: ShiftDirection) -> TimestampShift:
        return cls(offset=timedelta(hours=hours), direction=direction)

    @property
    def signed_offset(self) -> timedelta:
        return self.offset if self.direction is ShiftDirection.FORWARD else -self.offset

    def inverse(self) -> TimestampShift:
        return TimestampShift(offset=self.offset, direction=self.direction.inverse())

    def apply(self, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return value + self.signed_offset

    def apply_pair(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> tuple[datetime | None, datetime | None]:
        return self.apply(start), self.apply(end)


def shift_timestamps(
    records: Iterable[TransactionRecord],
    shift: TimestampShift,
    *,
    scope_id: ScopeId | None = None,
) -> list[TransactionRecord]:
    """Return the in-scope records with start and end times shifted.

    Records outside ``scope_id`` are dropped from the result; pass ``None`` to
    shift everything given.
    """

    shifted: list[TransactionRecord] = []
    for record in records:
        if scope_id is not None and record.scope_id != scope_id:
            continue
        start, end = shift.apply_pair(record.start_time, record.end_time)
        shifted.append(replace(record, start_time=start, end_time=end))
    return shifted
