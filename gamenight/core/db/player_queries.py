"""Player and ownership-edge queries."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from gamenight.core.db.models import row_to_player
from gamenight.core.player import Player

logger = logging.getLogger("gamenight.database")

__all__ = ["PlayerQueryMixin"]

# Stay well under SQLite's host parameter limit
_IN_CHUNK = 500


class PlayerQueryMixin:
    """Mixin providing player seeding and ownership lookups.

    Requires TableQueryMixin methods: select, upsert.
    """

    def seed_players(self, entries: Iterable[dict[str, Any]]) -> int:
        """Creates or updates players from configuration entries.

        Each entry needs ``name`` and ``steam_id``; ``is_primary`` and
        ``steam_profile_url`` are optional. Entries missing a field are
        skipped with a warning.

        Args:
            entries: Player seed dicts.

        Returns:
            Number of players written.
        """
        written = 0
        for entry in entries:
            steam_id = str(entry.get("steam_id") or "").strip()
            name = str(entry.get("name") or "").strip()
            if not steam_id or not name:
                logger.warning("Skipping player seed without name/steam_id: %r", entry)
                continue

            self.upsert(
                "players",
                {
                    "steam_id": steam_id,
                    "name": name,
                    "is_primary": bool(entry.get("is_primary", False)),
                    "steam_profile_url": entry.get("steam_profile_url")
                    or f"https://steamcommunity.com/profiles/{steam_id}",
                },
            )
            written += 1

        logger.info("Seeded %d player(s)", written)
        return written

    def get_players(self) -> list[Player]:
        """All players, primary players first, then by name."""
        rows = self.select("players", order=(("is_primary", False), ("name", True)))
        return [row_to_player(row) for row in rows]

    def get_game_ids_by_app_id(self, app_ids: Iterable[int]) -> dict[int, str]:
        """Maps external app IDs to surrogate game IDs for known games.

        Args:
            app_ids: Steam app IDs to look up.

        Returns:
            Dict of app ID to game ID; unknown IDs are absent.
        """
        ids = list(dict.fromkeys(int(app_id) for app_id in app_ids))
        found: dict[int, str] = {}
        for start in range(0, len(ids), _IN_CHUNK):
            chunk = ids[start : start + _IN_CHUNK]
            for row in self.select("games", filters=(("steam_app_id", "in", chunk),)):
                found[row["steam_app_id"]] = row["id"]
        return found

    def upsert_player_game(
        self,
        player_id: str,
        game_id: str,
        playtime_hours: float,
        last_played_at: str | None,
    ) -> dict[str, Any]:
        """Writes one ownership edge keyed by (player_id, game_id)."""
        return self.upsert(
            "player_games",
            {
                "player_id": player_id,
                "game_id": game_id,
                "playtime_hours": playtime_hours,
                "last_played_at": last_played_at,
            },
        )
