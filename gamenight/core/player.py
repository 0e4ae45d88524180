"""Player and ownership-edge dataclasses."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Player", "PlayerGame"]


@dataclass
class Player:
    """A member of the group, keyed by their Steam ID.

    Players are seeded from configuration; the library sync only refreshes
    ``avatar_url`` and ``last_synced_at``.
    """

    id: str
    name: str
    steam_id: str
    steam_profile_url: str | None = None
    avatar_url: str | None = None
    is_primary: bool = False
    last_synced_at: str | None = None
    created_at: str | None = None


@dataclass
class PlayerGame:
    """Ownership edge between a player and a catalog entry.

    At most one edge exists per ``(player_id, game_id)`` pair.
    """

    player_id: str
    game_id: str
    id: str = ""
    playtime_hours: float = 0.0
    last_played_at: str | None = None
