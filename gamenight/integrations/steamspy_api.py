"""SteamSpy client for popularity rankings and community tags."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from gamenight.integrations.api_client import ApiClient

logger = logging.getLogger("gamenight.steamspy_api")

__all__ = ["SteamSpyClient", "SteamSpyEntry"]

_API_URL = "https://steamspy.com/api.php"
_MAX_TAGS = 10


@dataclass(frozen=True)
class SteamSpyEntry:
    """One entry of a SteamSpy ranking.

    Attributes:
        app_id: Steam app ID.
        name: Display name.
        average_2weeks: Average playtime over the last two weeks (minutes).
        ccu: Peak concurrent users yesterday.
    """

    app_id: int
    name: str
    average_2weeks: int = 0
    ccu: int = 0


class SteamSpyClient(ApiClient):
    """Keyless SteamSpy client."""

    name = "SteamSpy"
    timeout = 20.0

    def _ranking(self, request: str) -> list[SteamSpyEntry] | None:
        data = self._get_json(_API_URL, {"request": request})
        if not isinstance(data, dict):
            return None

        entries: list[SteamSpyEntry] = []
        for key, item in data.items():
            if not isinstance(item, dict) or not str(key).isdigit():
                continue
            try:
                entry = SteamSpyEntry(
                    app_id=int(key),
                    name=str(item.get("name") or ""),
                    average_2weeks=int(item.get("average_2weeks") or 0),
                    ccu=int(item.get("ccu") or 0),
                )
            except (TypeError, ValueError) as exc:
                logger.warning("SteamSpy: skipping malformed %s entry %s: %s", request, key, exc)
                continue
            entries.append(entry)
        return entries

    def get_top_in_two_weeks(self) -> list[SteamSpyEntry] | None:
        """Top 100 games by players in the last two weeks.

        Returns:
            The ranking in SteamSpy's order, or None if SteamSpy is unavailable.
        """
        return self._ranking("top100in2weeks")

    def get_top_owned(self) -> list[SteamSpyEntry] | None:
        """Top 100 games by total owners, or None if unavailable."""
        return self._ranking("top100forever")

    def get_tags(self, app_id: int) -> list[str] | None:
        """Community tags for an app, most voted first.

        Returns:
            Up to ten tag names, or None when SteamSpy has none.
        """
        data = self._get_json(_API_URL, {"request": "appdetails", "appid": app_id})
        if not isinstance(data, dict):
            return None

        tags: Any = data.get("tags")
        if not isinstance(tags, dict) or not tags:
            return None
        return [str(tag) for tag in tags][:_MAX_TAGS]
