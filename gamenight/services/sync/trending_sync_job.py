"""Trending sync: rank scores from SteamSpy's two-week most played list.

All trending scores are cleared, then re-derived: the top entry scores 100
and each following rank one point less, never below 1. Ranked titles the
catalog lacks can be enriched on the spot. A second pass gives known games
with many live players but no rank a score in the 1-50 band.
"""

from __future__ import annotations

import logging
from typing import Any

from gamenight.integrations.api_client import GatewayError
from gamenight.integrations.steamspy_api import SteamSpyClient
from gamenight.services.enrichment.game_enricher import GameEnricher
from gamenight.services.sync.base_job import BaseSyncJob

logger = logging.getLogger("gamenight.sync.trending")

__all__ = ["TrendingSyncJob", "rank_score", "secondary_score"]

RANK_TOP_SCORE = 100
RANK_STEP = 1
RANK_FLOOR = 1

SECONDARY_TOP_SCORE = 50
SECONDARY_MIN_PLAYERS = 1000
SECONDARY_LIMIT = 100


def rank_score(index: int) -> int:
    """Trending score for a 0-based rank."""
    return max(RANK_FLOOR, RANK_TOP_SCORE - index * RANK_STEP)


def secondary_score(index: int) -> int:
    """Score for the n-th busiest unranked game (two games per point)."""
    return max(RANK_FLOOR, SECONDARY_TOP_SCORE - index // 2)


class TrendingSyncJob(BaseSyncJob):
    """Recomputes trending scores."""

    sync_type = "trending"

    def __init__(
        self,
        db: Any,
        steamspy: SteamSpyClient,
        enricher: GameEnricher | None = None,
        *,
        enrich_missing: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(db, **kwargs)
        self.steamspy = steamspy
        self.enricher = enricher
        self.enrich_missing = enrich_missing and enricher is not None

    def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        ranking = self.steamspy.get_top_in_two_weeks()
        if ranking is None:
            raise GatewayError("SteamSpy ranking is unavailable")

        ranked = sorted(ranking, key=lambda entry: entry.average_2weeks, reverse=True)
        self.progress = {"gamesUpdated": 0, "added": 0, "boosted": 0}

        cleared = self.db.update("games", {"trending_score": None}, (("trending_score", "not_null", None),))
        logger.debug("Cleared %d trending score(s)", cleared)

        known = self.db.get_game_ids_by_app_id(entry.app_id for entry in ranked)
        pending = 0

        for index, entry in enumerate(ranked):
            score = rank_score(index)
            game_id = known.get(entry.app_id)

            if game_id is not None:
                if self._update_game(game_id, {"trending_score": score}):
                    self.progress["gamesUpdated"] += 1
            elif self.enrich_missing:
                if not self._time_left():
                    pending += 1
                    continue
                outcome = self.enricher.enrich(self.db, entry.app_id, extra={"trending_score": score})
                if outcome.added:
                    self.progress["added"] += 1
                    self.progress["gamesUpdated"] += 1

        self._boost_active_games()

        return {
            "success": True,
            "ranked": len(ranked),
            "gamesUpdated": self.progress["gamesUpdated"],
            "added": self.progress["added"],
            "boosted": self.progress["boosted"],
            "pendingEnrichment": pending,
        }

    def _boost_active_games(self) -> None:
        busy = self.db.select(
            "games",
            filters=(("trending_score", "is_null", None), ("current_players", "gt", SECONDARY_MIN_PLAYERS)),
            order=(("current_players", False),),
            range_=(0, SECONDARY_LIMIT - 1),
        )
        for index, game in enumerate(busy):
            if self._update_game(game["id"], {"trending_score": secondary_score(index)}):
                self.progress["boosted"] += 1
                self.progress["gamesUpdated"] += 1
