"""IsThereAnyDeal client for best third-party prices.

Prices are resolved in two steps: a Steam app ID is first mapped to the
ITAD game ID, then one overview call returns the current best deal for a
batch of ITAD IDs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gamenight.integrations.api_client import ApiClient

logger = logging.getLogger("gamenight.itad_api")

__all__ = ["DealPrice", "ITADClient"]

_API_URL = "https://api.isthereanydeal.com"


@dataclass(frozen=True)
class DealPrice:
    """Current best deal for one game.

    Attributes:
        price_cents: Price in minor units.
        shop: Store name, if reported.
        url: Deep link to the deal, if reported.
    """

    price_cents: int
    shop: str | None = None
    url: str | None = None


class ITADClient(ApiClient):
    """IsThereAnyDeal API client.

    Attributes:
        api_key: ITAD API key.
        country: Two-letter country code prices are quoted for.
    """

    name = "IsThereAnyDeal"

    def __init__(self, api_key: str, country: str = "GB") -> None:
        """Initializes the client.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key or not api_key.strip():
            raise ValueError("ITAD API key must not be empty")
        super().__init__()
        self.api_key = api_key.strip()
        self.country = country

    def lookup_id(self, app_id: int) -> str | None:
        """Maps a Steam app ID to the ITAD game ID.

        Returns:
            The ITAD ID, or None if ITAD does not know the game.
        """
        data = self._get_json(f"{_API_URL}/games/lookup/v1", {"key": self.api_key, "appid": app_id})
        if not isinstance(data, dict) or not data.get("found"):
            return None
        game = data.get("game")
        if not isinstance(game, dict) or not isinstance(game.get("id"), str):
            logger.warning("IsThereAnyDeal: malformed lookup for app %d", app_id)
            return None
        return game["id"]

    def get_overview(self, itad_ids: list[str]) -> dict[str, DealPrice]:
        """Fetches current best deals for a batch of ITAD IDs.

        Args:
            itad_ids: ITAD game IDs.

        Returns:
            Dict of ITAD ID to its current deal; IDs without a deal are absent.
        """
        if not itad_ids:
            return {}

        data = self._post_json(
            f"{_API_URL}/games/overview/v2",
            params={"key": self.api_key, "country": self.country},
            body=list(itad_ids),
        )
        if not isinstance(data, dict):
            return {}

        deals: dict[str, DealPrice] = {}
        prices = data.get("prices")
        for entry in prices if isinstance(prices, list) else []:
            current = entry.get("current") if isinstance(entry, dict) else None
            if not isinstance(current, dict):
                continue
            shop = current.get("shop")
            try:
                deals[str(entry["id"])] = DealPrice(
                    price_cents=int(current["price"]["amountInt"]),
                    shop=shop.get("name") if isinstance(shop, dict) else None,
                    url=current.get("url"),
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("IsThereAnyDeal: malformed price entry %r: %s", entry.get("id"), exc)
        return deals
