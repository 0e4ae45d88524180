"""Derived catalog signals computed from raw storefront data.

Pure functions: review labels from positivity, multiplayer detection from
store categories, group-size inference from categories and tags, and the
price/sale fields from a storefront price block.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

from gamenight.core.game import MMO_MAX_PLAYERS

__all__ = [
    "BATTLE_ROYALE_MAX_PLAYERS",
    "MULTIPLAYER_CATEGORIES",
    "infer_max_players",
    "is_multiplayer",
    "price_fields",
    "review_label",
    "round_half_up",
]

# Store categories that mark a title as multiplayer.
MULTIPLAYER_CATEGORIES: frozenset[str] = frozenset(
    {
        "Multi-player",
        "Online Multi-Player",
        "Co-op",
        "Online Co-op",
        "LAN Co-op",
        "Shared/Split Screen",
        "Shared/Split Screen Co-op",
    }
)

BATTLE_ROYALE_MAX_PLAYERS: int = 100

_ONLINE_MP = frozenset({"Multi-player", "Online Multi-Player"})
_COOP = frozenset({"Co-op", "Online Co-op"})
_SINGLE = frozenset({"Single-player"})
_LOCAL = frozenset({"Shared/Split Screen", "Shared/Split Screen Co-op", "Shared/Split Screen PvP"})

_MMO_RE = re.compile(r"\bmmo|massively multiplayer")

# (lower bound inclusive, label), checked top-down
_REVIEW_LABELS: tuple[tuple[int, str], ...] = (
    (95, "Overwhelmingly Positive"),
    (80, "Very Positive"),
    (70, "Mostly Positive"),
    (40, "Mixed"),
    (20, "Mostly Negative"),
)


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer with halves going up (42.5 -> 43)."""
    return math.floor(value + 0.5)


def review_label(positivity: int) -> str:
    """Maps a 0-100 positivity percentage to the storefront-style label.

    Args:
        positivity: Share of positive reviews in percent.

    Returns:
        The review label; anything below 20 is "Overwhelmingly Negative".
    """
    for threshold, label in _REVIEW_LABELS:
        if positivity >= threshold:
            return label
    return "Overwhelmingly Negative"


def is_multiplayer(categories: Iterable[str]) -> bool:
    """True if any store category is in the multiplayer whitelist."""
    return any(category in MULTIPLAYER_CATEGORIES for category in categories)


def infer_max_players(categories: Iterable[str], tags: Iterable[str]) -> int | None:
    """Infers a maximum group size from store categories and community tags.

    Rules are checked in order; the first match wins:

    1. MMO tag or category -> 999
    2. Battle royale tag or category -> 100
    3. Single-player only -> 1
    4. Local/split-screen only -> 4
    5. Co-op without online multiplayer -> 4
    6. Online multiplayer with co-op -> 8
    7. Online multiplayer only -> 16

    Args:
        categories: Store categories.
        tags: Community tags.

    Returns:
        The inferred maximum, or None when nothing is known.
    """
    categories = set(categories)
    combined = [value.lower() for value in (*categories, *tags)]

    if any(_MMO_RE.search(value) for value in combined):
        return MMO_MAX_PLAYERS
    if any("battle royale" in value for value in combined):
        return BATTLE_ROYALE_MAX_PLAYERS

    has_mp = bool(categories & _ONLINE_MP)
    has_coop = bool(categories & _COOP)
    has_sp = bool(categories & _SINGLE)
    has_local = bool(categories & _LOCAL)

    if has_sp and not has_mp and not has_coop and not has_local:
        return 1
    if has_local and not has_mp and not has_coop:
        return 4
    if has_coop and not has_mp:
        return 4
    if has_mp and has_coop:
        return 8
    if has_mp:
        return 16
    return None


def price_fields(is_free: bool, price_overview: dict[str, Any] | None) -> dict[str, Any]:
    """Derives the storefront price columns.

    Args:
        is_free: The storefront's free flag.
        price_overview: The storefront price block (``final`` in minor units,
            ``discount_percent``), if any.

    Returns:
        Dict with ``steam_price_cents``, ``is_on_sale`` and ``sale_percent``.
    """
    if is_free:
        return {"steam_price_cents": 0, "is_on_sale": False, "sale_percent": None}

    if not price_overview:
        return {"steam_price_cents": None, "is_on_sale": False, "sale_percent": None}

    discount = int(price_overview.get("discount_percent") or 0)
    final = price_overview.get("final")
    return {
        "steam_price_cents": int(final) if final is not None else None,
        "is_on_sale": discount > 0,
        "sale_percent": discount if discount > 0 else None,
    }
