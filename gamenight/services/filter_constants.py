# gamenight/services/filter_constants.py

"""Constants and enums for the dashboard filter and sort system.

Defines the SortKey, AppTab, ProtonFilter and ReleaseDateFilter enums,
the game-mode category sets and the per-tab default sort keys used by
FilterService, the sort engine and the configuration resolver.
"""

from __future__ import annotations

from enum import Enum

from gamenight.core.game import COMPAT_TIERS

__all__ = [
    "ALL_GAME_MODE_KEYS",
    "ALL_SORT_KEYS",
    "AppTab",
    "DEFAULT_SORT_KEY",
    "GAME_MODE_CATEGORIES",
    "PROTON_TIER_RANK",
    "ProtonFilter",
    "RELEASE_DATE_DAYS",
    "ReleaseDateFilter",
    "SortKey",
    "TAB_DEFAULT_SORT",
    "TAG_FACET_LIMIT",
]


class SortKey(Enum):
    """Available sort keys for the game list.

    Every key sorts descending except NAME (A-Z) and PRICE_ASC.
    """

    RECOMMENDATION = "recommendation"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    REVIEW_SCORE = "review_score"
    PLAYTIME = "playtime"
    NAME = "name"
    RECENTLY_ADDED = "recently_added"
    TRENDING = "trending"
    RELEASE_DATE = "release_date"
    CURRENT_PLAYERS = "current_players"


class AppTab(Enum):
    """Top-level dashboard tabs."""

    ALL = "all"
    TRENDING = "trending"
    NEW = "new"
    SHORTLISTED = "shortlisted"
    EXCLUDED = "excluded"


class ProtonFilter(Enum):
    """Compatibility-tier floor.

    Attributes:
        ALL: No restriction.
        NATIVE: Exactly a native Linux build.
        PLATINUM: Platinum or better.
        GOLD: Gold or better.
    """

    ALL = "all"
    NATIVE = "native"
    PLATINUM = "platinum"
    GOLD = "gold"


class ReleaseDateFilter(Enum):
    """Release-recency ceiling."""

    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    YEAR = "year"
    TWO_YEARS = "2years"
    THREE_YEARS = "3years"
    FIVE_YEARS = "5years"
    TEN_YEARS = "10years"
    ALL = "all"


DEFAULT_SORT_KEY: SortKey = SortKey.RECOMMENDATION

ALL_SORT_KEYS: frozenset[str] = frozenset(key.value for key in SortKey)

# Lower rank is better; tiers missing here fail every floor
PROTON_TIER_RANK: dict[str, int] = {tier: rank for rank, tier in enumerate(COMPAT_TIERS)}

# Maximum age in days per bucket (ALL has no ceiling)
RELEASE_DATE_DAYS: dict[ReleaseDateFilter, int] = {
    ReleaseDateFilter.WEEK: 7,
    ReleaseDateFilter.MONTH: 30,
    ReleaseDateFilter.THREE_MONTHS: 90,
    ReleaseDateFilter.SIX_MONTHS: 180,
    ReleaseDateFilter.YEAR: 365,
    ReleaseDateFilter.TWO_YEARS: 730,
    ReleaseDateFilter.THREE_YEARS: 1095,
    ReleaseDateFilter.FIVE_YEARS: 1825,
    ReleaseDateFilter.TEN_YEARS: 3650,
}

# Store categories that satisfy each game-mode toggle
GAME_MODE_CATEGORIES: dict[str, frozenset[str]] = {
    "multiplayer": frozenset({"Multi-player", "Online Multi-Player", "Online PvP", "PvP", "LAN PvP"}),
    "coop": frozenset({"Co-op", "Online Co-op", "LAN Co-op", "Shared/Split Screen Co-op"}),
    "single_player": frozenset({"Single-player"}),
    "local_multiplayer": frozenset(
        {"Shared/Split Screen", "Shared/Split Screen Co-op", "Shared/Split Screen PvP", "LAN Co-op", "LAN PvP"}
    ),
}

ALL_GAME_MODE_KEYS: frozenset[str] = frozenset(GAME_MODE_CATEGORIES)

# Sort key a tab appends to the user's stack when missing
TAB_DEFAULT_SORT: dict[AppTab, SortKey] = {
    AppTab.ALL: SortKey.RECOMMENDATION,
    AppTab.TRENDING: SortKey.TRENDING,
    AppTab.NEW: SortKey.RELEASE_DATE,
    AppTab.SHORTLISTED: SortKey.RECOMMENDATION,
    AppTab.EXCLUDED: SortKey.NAME,
}

TAG_FACET_LIMIT: int = 20
