# gamenight/services/ownership_service.py

"""Joins the catalog with the ownership of the currently selected players."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from gamenight.core.game import Game, GameWithOwnership
from gamenight.core.player import Player, PlayerGame

__all__ = ["build_games_with_ownership"]


def build_games_with_ownership(
    games: Sequence[Game],
    player_games: Iterable[PlayerGame],
    players: Sequence[Player],
    selected_ids: Iterable[str],
) -> list[GameWithOwnership]:
    """Builds one ownership view per catalog entry.

    None of the inputs are mutated; the games themselves are shared, not
    copied.

    Args:
        games: All catalog entries.
        player_games: All ownership edges.
        players: All players.
        selected_ids: IDs of the currently selected players.

    Returns:
        A GameWithOwnership per game, in input order. ``owners`` only holds
        edges of selected players and ``all_selected_own`` is true for an
        empty selection.
    """
    selected = set(selected_ids)
    selected_players = [p for p in players if p.id in selected]

    edges_by_game: dict[str, list[PlayerGame]] = defaultdict(list)
    for edge in player_games:
        if edge.player_id in selected:
            edges_by_game[edge.game_id].append(edge)

    result: list[GameWithOwnership] = []
    for game in games:
        owners = list(edges_by_game.get(game.id, ()))
        owner_ids = {edge.player_id for edge in owners}
        missing = [p for p in selected_players if p.id not in owner_ids]
        result.append(
            GameWithOwnership(
                game=game,
                owners=owners,
                owner_count=len(owner_ids),
                all_selected_own=not missing,
                missing_players=missing,
            )
        )
    return result
