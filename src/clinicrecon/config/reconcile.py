"""Reconciliation run defaults loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .env import optional_float_env, optional_int_env

DEFAULT_CANONICAL_POLICY: Final[str] = "highest-price"
DEFAULT_SHIFT_HOURS: Final[float] = 2.0


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    """Defaults applied when the CLI does not receive explicit values."""

    scope_id: int | None = None
    canonical_policy: str = DEFAULT_CANONICAL_POLICY
    shift_hours: float = DEFAULT_SHIFT_HOURS

    @classmethod
    def from_environment(cls) -> ReconcileConfig:
        policy = (os.getenv("CLINICRECON_CANONICAL_POLICY") or "").strip()
        return cls(
            scope_id=optional_int_env("CLINICRECON_SCOPE_ID"),
            canonical_policy=policy or DEFAULT_CANONICAL_POLICY,
            shift_hours=optional_float_env("CLINICRECON_SHIFT_HOURS", DEFAULT_SHIFT_HOURS),
        )


def get_reconcile_config() -> ReconcileConfig:
    return ReconcileConfig.from_environment()
