# gamenight/services/recommendation.py

"""Recommendation score for a game and the current player selection.

The score is the sum of independent weighted factors, each clamped to its
own range, rounded half-up at the end. It ranks games against each other
and is not a percentage.
"""

from __future__ import annotations

from gamenight.core.game import GameWithOwnership
from gamenight.utils.catalog_signals import round_half_up

__all__ = [
    "LINUX_NATIVE_BONUS",
    "MAX_OWNERSHIP_POINTS",
    "MAX_PRICE_POINTS",
    "MAX_REVIEW_POINTS",
    "MAX_TRENDING_POINTS",
    "SALE_BONUS",
    "calculate_recommendation_score",
]

MAX_OWNERSHIP_POINTS = 40
MAX_REVIEW_POINTS = 25
MAX_PRICE_POINTS = 15
MAX_TRENDING_POINTS = 10
SALE_BONUS = 5
LINUX_NATIVE_BONUS = 5


def _ownership_points(entry: GameWithOwnership, selected_count: int) -> float:
    if selected_count <= 0:
        return 0.0
    return min(entry.owner_count, selected_count) * MAX_OWNERSHIP_POINTS / selected_count


def _review_points(positivity: int | None) -> float:
    if not positivity:
        return 0.0
    return max(0, min(positivity, 100)) * MAX_REVIEW_POINTS / 100


def _price_points(entry: GameWithOwnership) -> float:
    if entry.game.is_free:
        return float(MAX_PRICE_POINTS)
    cents = entry.game.price_cents
    if cents is None:
        return 0.0
    return max(0.0, MAX_PRICE_POINTS - cents / 100)


def _trending_points(trending_score: int | None) -> float:
    if not trending_score or trending_score < 0:
        return 0.0
    return min(MAX_TRENDING_POINTS, trending_score / 10)


def calculate_recommendation_score(entry: GameWithOwnership, selected_count: int) -> int:
    """Scores a game for the current selection.

    Factors:

    * ownership overlap, up to 40, by selected owners / selected players
    * review positivity, up to 25
    * price, up to 15: free gets all of it, otherwise 15 minus the price in
      major currency units (best third-party price first)
    * trending, up to 10: trending score / 10
    * 5 if on sale, 5 if the compatibility tier is exactly "native"

    Args:
        entry: The game with ownership of the selected players.
        selected_count: Number of selected players.

    Returns:
        A non-negative integer score.
    """
    game = entry.game
    score = (
        _ownership_points(entry, selected_count)
        + _review_points(game.steam_review_score)
        + _price_points(entry)
        + _trending_points(game.trending_score)
    )
    if game.is_on_sale:
        score += SALE_BONUS
    if game.protondb_rating == "native":
        score += LINUX_NATIVE_BONUS
    return round_half_up(score)
