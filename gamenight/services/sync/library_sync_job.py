"""Library sync: owned games, ownership edges and player avatars.

Every configured player's owned-games list is read (a failure here is
fatal). Games the catalog does not know yet are enriched within the time
budget, then one ownership edge per (player, game) is written for every
owned game the catalog knows, new or not.
"""

from __future__ import annotations

import logging
from typing import Any

from gamenight.core.db import StoreError
from gamenight.core.player import Player
from gamenight.integrations.steam_web_api import OwnedGame, SteamWebAPI
from gamenight.services.enrichment.game_enricher import GameEnricher
from gamenight.services.sync.base_job import BaseSyncJob
from gamenight.utils.date_utils import iso_from_unix, utc_now_iso

logger = logging.getLogger("gamenight.sync.libraries")

__all__ = ["LibrarySyncJob"]


class LibrarySyncJob(BaseSyncJob):
    """Synchronizes every player's library into the catalog."""

    sync_type = "libraries"

    def __init__(self, db: Any, web_api: SteamWebAPI, enricher: GameEnricher, **kwargs: Any) -> None:
        super().__init__(db, **kwargs)
        self.web_api = web_api
        self.enricher = enricher

    def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        players = self.db.get_players()
        if not players:
            raise RuntimeError("No players configured")

        owned = self._collect_owned(players)
        self.progress = {"ownedGames": len(owned), "added": 0, "skipped": 0, "edgesUpserted": 0}

        known = self.db.get_game_ids_by_app_id(owned)
        unknown = [app_id for app_id in owned if app_id not in known]
        pending = self._enrich_unknown(unknown)

        # Re-read so freshly inserted games get their edges in this run
        known = self.db.get_game_ids_by_app_id(owned)
        self._upsert_edges(owned, known)
        self._refresh_players(players)

        return {
            "success": True,
            "players": len(players),
            "ownedGames": len(owned),
            "newGames": len(unknown),
            "added": self.progress["added"],
            "skipped": self.progress["skipped"],
            "pendingEnrichment": pending,
            "edgesUpserted": self.progress["edgesUpserted"],
            "gamesUpdated": self.progress["added"],
        }

    def _collect_owned(self, players: list[Player]) -> dict[int, dict[str, OwnedGame]]:
        """Maps app ID to each owning player's entry."""
        owned: dict[int, dict[str, OwnedGame]] = {}
        for player in players:
            games = self.web_api.get_owned_games(player.steam_id)
            logger.info("%s owns %d game(s)", player.name, len(games))
            for game in games:
                owned.setdefault(game.app_id, {})[player.id] = game
        return owned

    def _enrich_unknown(self, unknown: list[int]) -> int:
        """Enriches uncataloged games; returns how many were left for the next run."""
        for index, app_id in enumerate(unknown):
            if not self._time_left():
                logger.info("Time budget reached, %d new game(s) left for the next run", len(unknown) - index)
                return len(unknown) - index
            outcome = self.enricher.enrich(self.db, app_id)
            self.progress["added" if outcome.added else "skipped"] += 1
        return 0

    def _upsert_edges(self, owned: dict[int, dict[str, OwnedGame]], known: dict[int, str]) -> None:
        for app_id, owners in owned.items():
            game_id = known.get(app_id)
            if game_id is None:
                continue
            for player_id, game in owners.items():
                try:
                    self.db.upsert_player_game(
                        player_id,
                        game_id,
                        game.playtime_hours,
                        iso_from_unix(game.last_played),
                    )
                except StoreError as exc:
                    logger.warning("Could not store ownership of app %d: %s", app_id, exc)
                    continue
                self.progress["edgesUpserted"] += 1

    def _refresh_players(self, players: list[Player]) -> None:
        """Best-effort avatar refresh; never affects the job status."""
        for player in players:
            patch: dict[str, Any] = {"last_synced_at": utc_now_iso()}
            summary = self._lookup(self.web_api.get_player_summary, player.steam_id)
            if isinstance(summary, dict) and summary.get("avatarmedium"):
                patch["avatar_url"] = summary["avatarmedium"]
            try:
                self.db.update("players", patch, (("id", "eq", player.id),))
            except StoreError as exc:
                logger.warning("Could not refresh player %s: %s", player.name, exc)
