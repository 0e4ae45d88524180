"""Tests for the dashboard data flow and its derived views."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest

from gamenight.core.db import StoreError
from gamenight.core.local_store import LocalStore
from gamenight.core.player import PlayerGame
from gamenight.core.sync_log import STATUS_ERROR, STATUS_SUCCESS, SyncLog
from gamenight.services.dashboard import Dashboard, PlayerStats
from gamenight.services.data_access import DataAccess
from gamenight.services.filter_constants import AppTab
from gamenight.services.tab_config import AppConfig, load_app_config

COOP = ["Online Co-op"]


@pytest.fixture
def data(players) -> MagicMock:
    """DataAccess double with players and no games."""
    data = MagicMock(spec=DataAccess)
    data.fetch_players.return_value = players
    data.fetch_games.return_value = []
    data.fetch_player_games.return_value = []
    data.fetch_latest_sync.return_value = None
    data.fetch_latest_successful_sync.return_value = None
    data.subscribe_changes.return_value = MagicMock()
    return data


@pytest.fixture
def dashboard(data: MagicMock, local_store: LocalStore) -> Dashboard:
    return Dashboard(data, local_store, today=lambda: date(2026, 10, 18))


def _ids(entries) -> list[str]:
    return [entry.game.id for entry in entries]


# ==================================================================
# Refresh and subscription
# ==================================================================


class TestRefresh:
    """Tests for fetching and applying store data."""

    def test_first_refresh_selects_primary_players(self, dashboard: Dashboard) -> None:
        assert dashboard.refresh() is True
        assert dashboard.selected_player_ids == ("p-alice", "p-bob")
        assert dashboard.loading is False
        assert dashboard.error is None

    def test_later_refresh_keeps_manual_selection(self, dashboard: Dashboard) -> None:
        dashboard.refresh()
        dashboard.toggle_player("p-carol")
        dashboard.refresh()
        assert dashboard.selected_player_ids == ("p-alice", "p-bob", "p-carol")

    def test_failed_fetch_keeps_previous_rows(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        game = make_game("Valheim", categories=COOP)
        data.fetch_games.return_value = [game]
        dashboard.refresh()

        data.fetch_games.side_effect = StoreError("connection lost")
        assert dashboard.refresh() is False

        assert dashboard.games == [game]
        assert "games" in dashboard.error
        assert dashboard.loading is False

    def test_error_clears_on_next_success(self, dashboard: Dashboard, data: MagicMock) -> None:
        data.fetch_player_games.side_effect = StoreError("down")
        dashboard.refresh()
        data.fetch_player_games.side_effect = None
        dashboard.refresh()
        assert dashboard.error is None

    def test_stale_response_dropped(self, dashboard: Dashboard, make_game) -> None:
        newer = [make_game("Newer")]
        older = [make_game("Older")]

        assert dashboard.apply_response("games", 2, newer) is True
        assert dashboard.apply_response("games", 1, older) is False
        assert dashboard.games == newer

    def test_sequence_is_per_entity(self, dashboard: Dashboard, make_game) -> None:
        dashboard.apply_response("games", 5, [make_game()])
        assert dashboard.apply_response("player_games", 1, []) is True

    def test_sync_status(self, dashboard: Dashboard, data: MagicMock) -> None:
        data.fetch_latest_sync.return_value = SyncLog(id="s2", sync_type="prices", status=STATUS_ERROR)
        data.fetch_latest_successful_sync.return_value = SyncLog(id="s1", sync_type="libraries", status=STATUS_SUCCESS)

        dashboard.refresh()

        assert dashboard.sync_status.failed is True
        assert dashboard.sync_status.latest_successful.id == "s1"

    def test_start_subscribes_and_change_refreshes(self, dashboard: Dashboard, data: MagicMock) -> None:
        dashboard.start()
        callback = data.subscribe_changes.call_args.args[0]

        callback("games", "UPDATE")

        assert data.fetch_games.call_count == 2

    def test_start_twice_subscribes_once(self, dashboard: Dashboard, data: MagicMock) -> None:
        dashboard.start()
        dashboard.start()
        assert data.subscribe_changes.call_count == 1

    def test_stop_unsubscribes(self, dashboard: Dashboard, data: MagicMock) -> None:
        dashboard.start()
        dashboard.stop()
        data.subscribe_changes.return_value.assert_called_once_with()


# ==================================================================
# Derived views
# ==================================================================


class TestViews:
    """Tests for the views rebuilt from the raw rows."""

    def test_visible_games_apply_tab_defaults(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        coop = make_game("Deep Rock", categories=COOP)
        solo = make_game("Solo Quest", categories=["Single-player"])
        mmo = make_game("Big World", categories=COOP, steam_tags=["Massively Multiplayer"])
        data.fetch_games.return_value = [coop, solo, mmo]
        dashboard.refresh()

        assert _ids(dashboard.visible_games()) == [coop.id]

    def test_selection_change_rebuilds_ownership(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        game = make_game("Valheim", categories=COOP)
        data.fetch_games.return_value = [game]
        data.fetch_player_games.return_value = [PlayerGame(player_id="p-carol", game_id=game.id)]
        dashboard.refresh()

        assert dashboard.enriched()[0].owner_count == 0
        dashboard.select_players(["p-carol"])
        assert dashboard.enriched()[0].owner_count == 1
        assert dashboard.enriched()[0].all_selected_own is True

    def test_quick_picks_need_enough_reviews(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        trusted = make_game("Trusted", categories=COOP, steam_review_score=80, steam_review_count=400)
        niche = make_game("Niche", categories=COOP, steam_review_score=99, steam_review_count=20)
        data.fetch_games.return_value = [niche, trusted]
        dashboard.refresh()

        assert _ids(dashboard.quick_picks()) == [trusted.id]

    def test_quick_picks_ranked_and_limited(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        games = [
            make_game(f"G{score}", categories=COOP, steam_review_score=score, steam_review_count=1000)
            for score in (50, 90, 70)
        ]
        data.fetch_games.return_value = games
        dashboard.refresh()

        picks = dashboard.quick_picks(limit=2)

        assert [p.game.steam_review_score for p in picks] == [90, 70]

    def test_coming_soon_order(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        later = make_game("Later", is_coming_soon=True, release_date="2027-03-01")
        sooner = make_game("Sooner", is_coming_soon=True, release_date="2026-11-20")
        undated = make_game("Someday", is_coming_soon=True)
        excluded = make_game("Excluded", is_coming_soon=True, release_date="2026-11-01")
        dead = make_game("Dead", is_coming_soon=True, release_date="2026-11-02", servers_deprecated=True)
        released = make_game("Out Now", release_date="2026-01-01")
        data.fetch_games.return_value = [later, sooner, undated, excluded, dead, released]
        dashboard.refresh()
        dashboard.exclude_game(excluded.id, "Not for us", "Alice")

        assert _ids(dashboard.coming_soon()) == [sooner.id, later.id, undated.id]

    def test_library_stats(self, dashboard: Dashboard, data: MagicMock, players, make_game) -> None:
        shared = make_game("Shared")
        free = make_game("Free", is_free=True)
        dead = make_game("Dead", servers_deprecated=True)
        data.fetch_games.return_value = [shared, free, dead]
        data.fetch_player_games.return_value = [
            PlayerGame(player_id="p-alice", game_id=shared.id, playtime_hours=10.5),
            PlayerGame(player_id="p-alice", game_id=free.id, playtime_hours=1.25),
            PlayerGame(player_id="p-bob", game_id=shared.id, playtime_hours=3.0),
            PlayerGame(player_id="p-carol", game_id=shared.id, playtime_hours=99.0),
        ]
        dashboard.refresh()

        stats = dashboard.library_stats()

        assert stats.total_games == 2
        assert stats.owned_by_all == 1
        assert stats.free_games == 1
        assert stats.players == [
            PlayerStats(player=players[0], owned_count=2, total_playtime_hours=11.75),
            PlayerStats(player=players[1], owned_count=1, total_playtime_hours=3.0),
        ]

    def test_tab_counts(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        hot = make_game("Hot", categories=COOP, trending_score=90)
        cold = make_game("Cold", categories=COOP)
        data.fetch_games.return_value = [hot, cold]
        dashboard.refresh()
        dashboard.toggle_shortlist(cold.id)

        counts = dashboard.tab_counts()

        assert counts[AppTab.ALL] == 2
        assert counts[AppTab.TRENDING] == 1
        assert counts[AppTab.SHORTLISTED] == 1
        assert counts[AppTab.EXCLUDED] == 0

    def test_restore_game(self, dashboard: Dashboard, data: MagicMock, make_game) -> None:
        game = make_game("Valheim", categories=COOP)
        data.fetch_games.return_value = [game]
        dashboard.refresh()

        dashboard.exclude_game(game.id, "Played out", "Bob")
        assert dashboard.visible_games() == []
        assert dashboard.restore_game(game.id) is True
        assert _ids(dashboard.visible_games()) == [game.id]


# ==================================================================
# Tabs and configuration
# ==================================================================


class TestTabsAndConfig:
    def test_set_tab_loads_tab_defaults(self, dashboard: Dashboard) -> None:
        config = AppConfig()
        config.set_tab_override(AppTab.TRENDING, linux_only=True)
        dashboard.update_config(config)

        dashboard.set_tab(AppTab.TRENDING)
        assert dashboard.filters.state.linux_only is True

        dashboard.set_tab(AppTab.ALL)
        assert dashboard.filters.state.linux_only is False

    def test_set_tab_without_defaults_keeps_filters(self, dashboard: Dashboard) -> None:
        dashboard.filters.toggle_linux_only()
        dashboard.set_tab(AppTab.NEW, apply_defaults=False)
        assert dashboard.tab == AppTab.NEW
        assert dashboard.filters.state.linux_only is True

    def test_update_config_persists(self, dashboard: Dashboard, local_store: LocalStore) -> None:
        dashboard.update_config(AppConfig(min_review_count=10))
        assert load_app_config(local_store).min_review_count == 10

    def test_saved_config_loaded_on_construction(self, data: MagicMock, local_store: LocalStore) -> None:
        local_store.set("config", {"version": 2, "linux_only": True})
        assert Dashboard(data, local_store).filters.state.linux_only is True
