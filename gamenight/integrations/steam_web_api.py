"""Steam Web API client for owned games, player summaries and live player counts.

Owned games and player summaries need an API key; the current-player
endpoint is keyless.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from gamenight.integrations.api_client import ApiClient, GatewayError

logger = logging.getLogger("gamenight.steam_web_api")

__all__ = ["OwnedGame", "SteamWebAPI"]

_API_URL = "https://api.steampowered.com"


@dataclass(frozen=True)
class OwnedGame:
    """One entry of a player's owned-games list.

    Attributes:
        app_id: Steam app ID.
        name: Display name as reported by the account service.
        playtime_minutes: Total playtime in minutes.
        last_played: Unix timestamp of the last session, 0 if never.
    """

    app_id: int
    name: str
    playtime_minutes: int = 0
    last_played: int = 0

    @property
    def playtime_hours(self) -> float:
        return round(self.playtime_minutes / 60, 2)


class SteamWebAPI(ApiClient):
    """Steam Web API client.

    Attributes:
        api_key: Steam Web API key for authentication.
    """

    name = "Steam Web API"

    def __init__(self, api_key: str | None) -> None:
        """Initializes the SteamWebAPI client.

        Args:
            api_key: Steam Web API key. May be empty when only keyless
                endpoints are used.
        """
        super().__init__()
        self.api_key: str = (api_key or "").strip()

    def _require_key(self) -> None:
        if not self.api_key:
            raise GatewayError("Steam API key is not configured")

    def get_owned_games(self, steam_id: str) -> list[OwnedGame]:
        """Fetches a player's full owned-games list.

        Args:
            steam_id: 64-bit Steam ID.

        Returns:
            Owned games, including played free games.

        Raises:
            GatewayError: If the key is missing or the list cannot be fetched.
        """
        self._require_key()
        data = self._get_json(
            f"{_API_URL}/IPlayerService/GetOwnedGames/v1/",
            {
                "key": self.api_key,
                "steamid": steam_id,
                "include_appinfo": 1,
                "include_played_free_games": 1,
                "format": "json",
            },
        )
        response = data.get("response") if isinstance(data, dict) else None
        if not isinstance(response, dict):
            raise GatewayError(f"Could not fetch owned games for {steam_id}")

        games = response.get("games") or []
        if not isinstance(games, list):
            raise GatewayError(f"Malformed owned-games list for {steam_id}")

        owned: list[OwnedGame] = []
        for item in games:
            if not isinstance(item, dict) or not item.get("appid"):
                continue
            parsed = self._parse_owned_game(item)
            if parsed is not None:
                owned.append(parsed)
        return owned

    @staticmethod
    def _parse_owned_game(item: dict[str, Any]) -> OwnedGame | None:
        try:
            return OwnedGame(
                app_id=int(item["appid"]),
                name=str(item.get("name") or f"App {item['appid']}"),
                playtime_minutes=int(item.get("playtime_forever") or 0),
                last_played=int(item.get("rtime_last_played") or 0),
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Steam Web API: skipping malformed owned game %r: %s", item.get("appid"), exc)
            return None

    def get_player_summary(self, steam_id: str) -> dict[str, Any] | None:
        """Fetches a player's profile summary (avatar, persona name).

        Returns:
            The summary dict, or None on any failure.
        """
        if not self.api_key:
            return None
        data = self._get_json(
            f"{_API_URL}/ISteamUser/GetPlayerSummaries/v2/",
            {"key": self.api_key, "steamids": steam_id},
        )
        if not isinstance(data, dict):
            return None
        response = data.get("response")
        players = response.get("players") if isinstance(response, dict) else None
        if not isinstance(players, list) or not players or not isinstance(players[0], dict):
            return None
        return players[0]

    def get_current_players(self, app_id: int) -> int | None:
        """Fetches the live concurrent-player count for an app.

        Returns:
            The count, or None if the endpoint has no answer for the app.
        """
        data = self._get_json(
            f"{_API_URL}/ISteamUserStats/GetNumberOfCurrentPlayers/v1/",
            {"appid": app_id},
        )
        if not isinstance(data, dict):
            return None
        response = data.get("response")
        if not isinstance(response, dict) or response.get("result") != 1 or response.get("player_count") is None:
            return None
        try:
            return int(response["player_count"])
        except (TypeError, ValueError) as exc:
            logger.warning("Steam Web API: malformed player count for app %d: %s", app_id, exc)
            return None
