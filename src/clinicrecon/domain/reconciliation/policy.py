"""Tie-break policies that pick the canonical entry of a duplicate class.

A policy maps an entry to a sort key; the entry with the smallest key wins.
Keys must end in the entry id so that the choice is total and deterministic.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING, Final

from .errors import UnknownPolicyError

if TYPE_CHECKING:
    from clinicrecon.domain.model import CatalogEntry


type CanonicalPolicy = Callable[[CatalogEntry], tuple[object, ...]]


def highest_price_policy(entry: CatalogEntry) -> tuple[object, ...]:
    """Prefer the highest price; a missing price ranks below any price."""

    has_price = entry.price is not None
    price = entry.price if entry.price is not None else Decimal(0)
    return (not has_price, -price, entry.id)


def lowest_id_policy(entry: CatalogEntry) -> tuple[object, ...]:
    """Prefer the oldest entry."""

    return (entry.id,)


POLICIES: Final[dict[str, CanonicalPolicy]] = {
    "highest-price": highest_price_policy,
    "lowest-id": lowest_id_policy,
}


def policy_by_name(name: str) -> CanonicalPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        known = ", ".join(sorted(POLICIES))
        raise UnknownPolicyError(f"Unknown canonical policy {name!r} (known: {known})") from None
