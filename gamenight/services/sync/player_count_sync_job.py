"""Player-count sync: live concurrent players, rotating through the catalog.

Games are visited stalest first. A hit writes the count and the refresh
timestamp; a miss writes only the timestamp so the rotation advances past
games the endpoint cannot answer for.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from gamenight.integrations.steam_web_api import SteamWebAPI
from gamenight.services.sync.base_job import BaseSyncJob
from gamenight.utils.date_utils import utc_now_iso

logger = logging.getLogger("gamenight.sync.player_counts")

__all__ = ["PlayerCountSyncJob"]


class PlayerCountSyncJob(BaseSyncJob):
    """Refreshes current player counts for the stalest games."""

    sync_type = "player_counts"

    def __init__(
        self,
        db: Any,
        web_api: SteamWebAPI,
        *,
        batch_size: int = 50,
        chunk_size: int = 10,
        **kwargs: Any,
    ) -> None:
        super().__init__(db, **kwargs)
        self.web_api = web_api
        self.batch_size = max(1, batch_size)
        self.chunk_size = max(1, chunk_size)

    def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        games = self.db.select(
            "games",
            order=(("player_count_updated_at", True, True), ("steam_app_id", True)),
            range_=(0, self.batch_size - 1),
        )
        self.progress = {"processed": 0, "gamesUpdated": 0, "missed": 0}

        for start in range(0, len(games), self.chunk_size):
            if not self._time_left():
                logger.info("Time budget reached after %d game(s)", self.progress["processed"])
                break

            chunk = games[start : start + self.chunk_size]
            with ThreadPoolExecutor(max_workers=len(chunk)) as pool:
                counts = list(
                    pool.map(lambda game: self._lookup(self.web_api.get_current_players, game["steam_app_id"]), chunk)
                )

            checked_at = utc_now_iso()
            for game, count in zip(chunk, counts):
                patch: dict[str, Any] = {"player_count_updated_at": checked_at}
                if count is not None:
                    patch["current_players"] = count
                if self._update_game(game["id"], patch):
                    self.progress["gamesUpdated" if count is not None else "missed"] += 1
                self.progress["processed"] += 1

        return {
            "success": True,
            "batch": len(games),
            "processed": self.progress["processed"],
            "gamesUpdated": self.progress["gamesUpdated"],
            "missed": self.progress["missed"],
        }
