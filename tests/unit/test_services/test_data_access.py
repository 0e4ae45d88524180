"""Tests for the paging read side of the store."""

from __future__ import annotations

from gamenight.core.db import Database
from gamenight.core.sync_log import STATUS_ERROR, STATUS_SUCCESS
from gamenight.services.data_access import DataAccess


def _add_games(db: Database, names: list[str]) -> list[str]:
    ids = []
    for i, name in enumerate(names):
        row = db.upsert("games", {"steam_app_id": 500 + i, "name": name})
        ids.append(row["id"])
    return ids


class TestFetchAll:
    """Tests for DataAccess.fetch_all()."""

    def test_pages_through_every_row(self, database: Database) -> None:
        _add_games(database, [f"Game {i:02d}" for i in range(7)])
        data = DataAccess(database, page_size=3)

        rows = data.fetch_all("games", order=(("name", True),))

        assert [row["name"] for row in rows] == [f"Game {i:02d}" for i in range(7)]

    def test_exact_multiple_of_page_size(self, database: Database) -> None:
        _add_games(database, ["a", "b", "c", "d"])
        assert len(DataAccess(database, page_size=2).fetch_all("games")) == 4

    def test_empty_table(self, database: Database) -> None:
        assert DataAccess(database, page_size=2).fetch_all("games") == []

    def test_page_size_is_clamped(self, database: Database) -> None:
        assert DataAccess(database, page_size=0).page_size == 1
        assert DataAccess(database, page_size=10**6).page_size == 1000

    def test_filters_are_applied(self, database: Database) -> None:
        _add_games(database, ["keep", "drop"])
        rows = DataAccess(database).fetch_all("games", filters=(("name", "eq", "keep"),))
        assert [row["name"] for row in rows] == ["keep"]


class TestEntityFetches:
    """Tests for the typed fetch helpers."""

    def test_players_primary_first(self, seeded_database: Database) -> None:
        players = DataAccess(seeded_database, page_size=1).fetch_players()
        assert [p.name for p in players] == ["Alice", "Bob", "Carol"]
        assert [p.is_primary for p in players] == [True, True, False]

    def test_games_by_name(self, database: Database) -> None:
        _add_games(database, ["Zomboid", "Among Them", "Deep Rock"])
        games = DataAccess(database, page_size=2).fetch_games()
        assert [g.name for g in games] == ["Among Them", "Deep Rock", "Zomboid"]

    def test_player_games(self, seeded_database: Database) -> None:
        game_id = _add_games(seeded_database, ["Valheim"])[0]
        player = seeded_database.get_players()[0]
        seeded_database.upsert_player_game(player.id, game_id, 12.5, None)

        edges = DataAccess(seeded_database).fetch_player_games()

        assert len(edges) == 1
        assert edges[0].player_id == player.id
        assert edges[0].playtime_hours == 12.5

    def test_latest_sync_and_latest_successful(self, database: Database) -> None:
        ok_id = database.open_sync_log("libraries")
        database.close_sync_log(ok_id, STATUS_SUCCESS, games_updated=3)
        failed_id = database.open_sync_log("prices")
        database.close_sync_log(failed_id, STATUS_ERROR, error="boom")

        data = DataAccess(database)

        assert data.fetch_latest_sync().id == failed_id
        assert data.fetch_latest_successful_sync().id == ok_id

    def test_no_sync_yet(self, database: Database) -> None:
        data = DataAccess(database)
        assert data.fetch_latest_sync() is None
        assert data.fetch_latest_successful_sync() is None


class TestSubscribeChanges:
    """Tests for DataAccess.subscribe_changes()."""

    def test_receives_writes_to_watched_tables(self, seeded_database: Database) -> None:
        events: list[tuple[str, str]] = []
        DataAccess(seeded_database).subscribe_changes(lambda table, event: events.append((table, event)))

        game_id = _add_games(seeded_database, ["Valheim"])[0]
        seeded_database.upsert_player_game(seeded_database.get_players()[0].id, game_id, 1.0, None)
        seeded_database.open_sync_log("trending")

        assert events == [("games", "INSERT"), ("player_games", "INSERT"), ("sync_log", "INSERT")]

    def test_unsubscribe_removes_every_table(self, database: Database) -> None:
        events: list[tuple[str, str]] = []
        unsubscribe = DataAccess(database).subscribe_changes(lambda table, event: events.append((table, event)))

        unsubscribe()
        _add_games(database, ["Valheim"])
        database.open_sync_log("trending")

        assert events == []
