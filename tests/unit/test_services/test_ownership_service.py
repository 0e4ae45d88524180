"""Tests for the ownership join."""

from __future__ import annotations

from gamenight.core.player import PlayerGame
from gamenight.services.ownership_service import build_games_with_ownership


class TestBuildGamesWithOwnership:
    """Tests for build_games_with_ownership()."""

    def test_partial_ownership(self, make_game, players) -> None:
        game = make_game("Deep Rock")
        edges = [PlayerGame(player_id="p-alice", game_id=game.id, playtime_hours=12.0)]

        (entry,) = build_games_with_ownership([game], edges, players, ["p-alice", "p-bob"])

        assert entry.owner_count == 1
        assert entry.all_selected_own is False
        assert [p.name for p in entry.missing_players] == ["Bob"]
        assert entry.total_playtime_hours == 12.0

    def test_edges_of_unselected_players_are_ignored(self, make_game, players) -> None:
        game = make_game()
        edges = [
            PlayerGame(player_id="p-alice", game_id=game.id, playtime_hours=1.0),
            PlayerGame(player_id="p-carol", game_id=game.id, playtime_hours=50.0),
        ]

        (entry,) = build_games_with_ownership([game], edges, players, ["p-alice"])

        assert entry.owner_count == 1
        assert entry.all_selected_own is True
        assert entry.total_playtime_hours == 1.0

    def test_empty_selection_is_vacuously_owned(self, make_game, players) -> None:
        (entry,) = build_games_with_ownership([make_game()], [], players, [])
        assert entry.owner_count == 0
        assert entry.all_selected_own is True
        assert entry.missing_players == []

    def test_duplicate_edges_count_once(self, make_game, players) -> None:
        game = make_game()
        edges = [PlayerGame(player_id="p-alice", game_id=game.id)] * 2
        (entry,) = build_games_with_ownership([game], edges, players, ["p-alice", "p-bob"])
        assert entry.owner_count == 1

    def test_one_view_per_game_in_input_order(self, make_game, players) -> None:
        games = [make_game("B"), make_game("A"), make_game("C")]
        result = build_games_with_ownership(games, [], players, ["p-alice"])
        assert [e.game.name for e in result] == ["B", "A", "C"]
        assert all(e.game is g for e, g in zip(result, games))

    def test_inputs_are_not_mutated(self, make_game, players) -> None:
        game = make_game()
        edges = [PlayerGame(player_id="p-alice", game_id=game.id)]
        build_games_with_ownership([game], edges, players, ["p-alice"])
        assert len(edges) == 1
        assert len(players) == 3
