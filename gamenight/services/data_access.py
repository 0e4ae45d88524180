# gamenight/services/data_access.py

"""Read side of the canonical store used by the dashboard.

Every fetch pages through the store's capped result windows so callers
always see the full logical result set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from gamenight.core.db import MAX_PAGE_SIZE, Database
from gamenight.core.db.models import row_to_game, row_to_player, row_to_player_game
from gamenight.core.game import Game
from gamenight.core.player import Player, PlayerGame
from gamenight.core.sync_log import STATUS_SUCCESS, SyncLog

logger = logging.getLogger("gamenight.data_access")

__all__ = ["DataAccess", "WATCHED_TABLES"]

# Tables whose changes should refresh the dashboard
WATCHED_TABLES: tuple[str, ...] = ("games", "player_games", "players", "sync_log")


class DataAccess:
    """Fetches players, games, ownership edges and sync state."""

    def __init__(self, db: Database, page_size: int = MAX_PAGE_SIZE) -> None:
        self.db = db
        self.page_size = max(1, min(page_size, MAX_PAGE_SIZE))

    def fetch_all(
        self,
        table: str,
        order: Sequence[tuple] = (),
        filters: Sequence[tuple[str, str, Any]] = (),
    ) -> list[dict[str, Any]]:
        """Reads every matching row, one page at a time.

        Args:
            table: Table name.
            order: Order tuples; the surrogate ``id`` is used when empty.
            filters: Filter triples.

        Returns:
            All rows. Stops on the first short or empty page.
        """
        order = tuple(order) or (("id", True),)
        rows: list[dict[str, Any]] = []
        start = 0
        while True:
            page = self.db.select(table, filters, order, (start, start + self.page_size - 1))
            rows.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size
        logger.debug("Fetched %d row(s) from %s", len(rows), table)
        return rows

    def fetch_players(self) -> list[Player]:
        """Primary players first, then by name."""
        rows = self.fetch_all("players", order=(("is_primary", False), ("name", True)))
        return [row_to_player(row) for row in rows]

    def fetch_games(self) -> list[Game]:
        return [row_to_game(row) for row in self.fetch_all("games", order=(("name", True), ("id", True)))]

    def fetch_player_games(self) -> list[PlayerGame]:
        return [row_to_player_game(row) for row in self.fetch_all("player_games")]

    def fetch_latest_sync(self) -> SyncLog | None:
        """Most recently started sync run, or None."""
        return self.db.latest_sync_log()

    def fetch_latest_successful_sync(self) -> SyncLog | None:
        """Most recently started successful run, shown next to a failed one."""
        return self.db.latest_sync_log(STATUS_SUCCESS)

    def subscribe_changes(self, callback: Callable[[str, str], None]) -> Callable[[], None]:
        """Registers a callback for writes to any watched table.

        Returns:
            A function that removes every subscription made here.
        """
        unsubscribers = [self.db.subscribe(table, callback) for table in WATCHED_TABLES]

        def unsubscribe() -> None:
            for unsubscribe_one in unsubscribers:
                unsubscribe_one()

        return unsubscribe
