"""Max-players backfill: refine group sizes from store pages.

Walks the catalog in app ID order, a slice per call. Each game's store
page is scraped for a stated player count; without one the category/tag
heuristic is used. The call returns ``nextAfterAppId`` for the caller to
continue from, None when the catalog is exhausted.
"""

from __future__ import annotations

import logging
from typing import Any

from gamenight.integrations.steam_store import SteamStoreClient
from gamenight.services.sync.base_job import BaseSyncJob
from gamenight.utils.catalog_signals import infer_max_players

logger = logging.getLogger("gamenight.sync.max_players")

__all__ = ["MaxPlayersBackfillJob"]


class MaxPlayersBackfillJob(BaseSyncJob):
    """Backfills ``max_players`` for a slice of the catalog."""

    sync_type = "max_players"

    def __init__(self, db: Any, store: SteamStoreClient, *, batch_size: int = 25, **kwargs: Any) -> None:
        super().__init__(db, **kwargs)
        self.store = store
        self.batch_size = max(1, batch_size)

    def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        after = int(payload.get("afterAppId") or 0)
        games = self.db.select(
            "games",
            filters=(("steam_app_id", "gt", after),),
            order=(("steam_app_id", True),),
            range_=(0, self.batch_size - 1),
        )
        self.progress = {"fromStore": 0, "fromHeuristic": 0, "noData": 0, "gamesUpdated": 0}

        last_app_id: int | None = None
        for game in games:
            if last_app_id is not None and not self._time_left():
                break
            last_app_id = game["steam_app_id"]

            max_players = self._lookup(self.store.get_max_players_hint, game["steam_app_id"])
            source = "fromStore"
            if max_players is None:
                max_players = infer_max_players(game["categories"], game["steam_tags"])
                source = "fromHeuristic"

            if max_players is None:
                self.progress["noData"] += 1
                continue

            if self._update_game(game["id"], {"max_players": max_players}):
                self.progress[source] += 1
                self.progress["gamesUpdated"] += 1

        exhausted = last_app_id is None or (len(games) < self.batch_size and last_app_id == games[-1]["steam_app_id"])
        return {
            "success": True,
            **self.progress,
            "nextAfterAppId": None if exhausted else last_app_id,
        }
