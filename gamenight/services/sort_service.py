# gamenight/services/sort_service.py

"""Multi-key sort engine for the game list.

The user's sort stack is an ordered list of keys evaluated as a
tie-breaking chain. A tab may append its own default key to the end of the
stack. Sorting never mutates the input list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from functools import cmp_to_key

from gamenight.core.game import GameWithOwnership
from gamenight.services.filter_constants import ALL_SORT_KEYS, DEFAULT_SORT_KEY, TAB_DEFAULT_SORT, AppTab, SortKey
from gamenight.services.recommendation import calculate_recommendation_score

logger = logging.getLogger("gamenight.sort_service")

__all__ = [
    "MISSING_PRICE",
    "SortToggleMode",
    "effective_sort_keys",
    "normalize_sort_keys",
    "sort_games",
    "toggle_sort_key",
]

# Sorts games without any price data after every priced game
MISSING_PRICE = 99999


class SortToggleMode(Enum):
    """What clicking an already active sort key does.

    Attributes:
        REMOVE: Drop the key from the stack.
        PROMOTE: Move the key to the front of the stack.
    """

    REMOVE = "remove"
    PROMOTE = "promote"


def _compare(a: float | str, b: float | str) -> int:
    return (a > b) - (a < b)


def _price(entry: GameWithOwnership, missing: int) -> int:
    if entry.game.is_free:
        return 0
    cents = entry.game.price_cents
    return missing if cents is None else cents


def _make_comparator(
    key: SortKey, score: Callable[[GameWithOwnership], int]
) -> Callable[[GameWithOwnership, GameWithOwnership], int]:
    """Returns a cmp-style function for one sort key."""
    if key == SortKey.RECOMMENDATION:
        return lambda a, b: _compare(score(b), score(a))
    if key == SortKey.PRICE_ASC:
        return lambda a, b: _compare(_price(a, MISSING_PRICE), _price(b, MISSING_PRICE))
    if key == SortKey.PRICE_DESC:

        def by_price_desc(a: GameWithOwnership, b: GameWithOwnership) -> int:
            # Missing prices go last in this direction too
            a_missing = not a.game.is_free and a.game.price_cents is None
            b_missing = not b.game.is_free and b.game.price_cents is None
            if a_missing or b_missing:
                return _compare(a_missing, b_missing)
            return _compare(_price(b, 0), _price(a, 0))

        return by_price_desc
    if key == SortKey.REVIEW_SCORE:
        return lambda a, b: _compare(b.game.steam_review_score or 0, a.game.steam_review_score or 0)
    if key == SortKey.PLAYTIME:
        return lambda a, b: _compare(b.total_playtime_hours, a.total_playtime_hours)
    if key == SortKey.NAME:
        return lambda a, b: _compare(a.game.name.casefold(), b.game.name.casefold())
    if key == SortKey.RECENTLY_ADDED:
        return lambda a, b: _compare(b.game.created_at or "", a.game.created_at or "")
    if key == SortKey.TRENDING:
        return lambda a, b: _compare(b.game.trending_score or 0, a.game.trending_score or 0)
    if key == SortKey.RELEASE_DATE:
        # Undated games sort as oldest
        return lambda a, b: _compare(b.game.release_date or "", a.game.release_date or "")
    if key == SortKey.CURRENT_PLAYERS:
        return lambda a, b: _compare(b.game.current_players or 0, a.game.current_players or 0)
    raise ValueError(f"Unsupported sort key: {key}")


def sort_games(
    games: Sequence[GameWithOwnership],
    keys: Sequence[SortKey],
    selected_count: int,
) -> list[GameWithOwnership]:
    """Sorts games by a stack of keys.

    The first key that does not tie decides the order; full ties keep
    their input order.

    Args:
        games: The games to sort.
        keys: Sort stack, highest priority first.
        selected_count: Number of selected players, for the recommendation key.

    Returns:
        A new sorted list.
    """
    scores: dict[int, int] = {}

    def score(entry: GameWithOwnership) -> int:
        cached = scores.get(id(entry))
        if cached is None:
            cached = scores[id(entry)] = calculate_recommendation_score(entry, selected_count)
        return cached

    comparators = [_make_comparator(key, score) for key in keys or (DEFAULT_SORT_KEY,)]

    def chained(a: GameWithOwnership, b: GameWithOwnership) -> int:
        for comparator in comparators:
            result = comparator(a, b)
            if result:
                return result
        return 0

    return sorted(games, key=cmp_to_key(chained))


def normalize_sort_keys(values: Iterable[SortKey | str]) -> list[SortKey]:
    """Parses a persisted or user-supplied stack.

    Unknown keys are dropped with a warning, duplicates keep their first
    position, and an empty result falls back to the default key.
    """
    keys: list[SortKey] = []
    for value in values:
        if isinstance(value, SortKey):
            key = value
        elif isinstance(value, str) and value in ALL_SORT_KEYS:
            key = SortKey(value)
        else:
            logger.warning("Unknown sort key: %r, ignoring", value)
            continue
        if key not in keys:
            keys.append(key)
    return keys or [DEFAULT_SORT_KEY]


def toggle_sort_key(
    stack: Sequence[SortKey],
    key: SortKey,
    mode: SortToggleMode = SortToggleMode.REMOVE,
) -> list[SortKey]:
    """Applies a click on a sort key to the stack.

    An inactive key is appended. An active key is removed (REMOVE) or moved
    to the front (PROMOTE). The stack never becomes empty: removing the
    last key resets it to the default key.

    Args:
        stack: Current sort stack.
        key: The clicked key.
        mode: Behaviour for an already active key.

    Returns:
        The new stack.
    """
    keys = list(stack)
    if key not in keys:
        return [*keys, key]
    if mode == SortToggleMode.PROMOTE:
        return [key, *(k for k in keys if k != key)]
    remaining = [k for k in keys if k != key]
    return remaining or [DEFAULT_SORT_KEY]


def effective_sort_keys(stack: Sequence[SortKey], tab: AppTab) -> list[SortKey]:
    """Appends the tab's default key to the stack unless already present."""
    keys = list(stack) or [DEFAULT_SORT_KEY]
    tab_key = TAB_DEFAULT_SORT.get(tab)
    if tab_key is not None and tab_key not in keys:
        keys.append(tab_key)
    return keys
