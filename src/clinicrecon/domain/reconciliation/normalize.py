"""Label normalization shared by duplicate resolution and linking."""

from __future__ import annotations

import re
from typing import Final

_WHITESPACE: Final = re.compile(r"\s+")


def normalize_label(label: str | None) -> str:
    """Return the comparison key for a display label.

    Lowercases, collapses every whitespace run to one space and trims. The
    result is stable under repeated application; ``None`` maps to ``""``.
    """

    if label is None:
        return ""
    return _WHITESPACE.sub(" ", label.lower()).strip()
