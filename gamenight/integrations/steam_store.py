"""Steam Store client: app details, reviews, search listings and store pages.

All endpoints are keyless. Search listings come back as an HTML fragment
inside JSON and are parsed with BeautifulSoup; store pages are scraped for
player-count hints. Requests are spaced by a minimum interval so callers
looping over many apps stay under the storefront's rate limit.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup

from gamenight.integrations.api_client import ApiClient
from gamenight.utils.catalog_signals import review_label, round_half_up

logger = logging.getLogger("gamenight.steam_store")

__all__ = [
    "DISCOVERY_SEARCH_FILTERS",
    "ReviewSummary",
    "SteamStoreClient",
    "StoreAppDetails",
    "StorePrice",
    "extract_max_players",
]

_STORE_URL = "https://store.steampowered.com"

# Named search filters used for catalog discovery
DISCOVERY_SEARCH_FILTERS: tuple[str, ...] = ("globaltopsellers", "topsellers", "popularnew", "popularcomingsoon")

# Age gate bypass for store page scraping
_STORE_PAGE_COOKIES = "birthtime=0; wants_mature_content=1; lastagecheckage=1-0-1990; Steam_Language=english"

# Checked in order; a pattern returning a fixed count has no capture group
_PLAYER_COUNT_PATTERNS: tuple[tuple[re.Pattern[str], int | None], ...] = (
    (re.compile(r"up\s+to\s+(\d+)\s+player", re.I), None),
    (re.compile(r"(\d+)\s*[-–]\s*(\d+)\s+player", re.I), None),
    (re.compile(r"\b(\d+)\s+player\b", re.I), None),
    (re.compile(r"\bfor\s+two\b", re.I), 2),
    (re.compile(r"\bduo\b", re.I), 2),
    (re.compile(r"Online\s+(?:Multi-Player|Co-op)\s*\((\d+)(?:\s*-\s*(\d+))?\)", re.I), None),
    (re.compile(r"supports?\s+up\s+to\s+(\d+)", re.I), None),
)


@dataclass(frozen=True)
class StoreAppDetails:
    """Frozen subset of the storefront app details document.

    Attributes:
        app_id: Steam app ID.
        app_type: Catalog type ("game", "dlc", "music", ...).
        name: Display name.
        header_image: Header image URL.
        short_description: Store blurb.
        is_free: Free-to-play flag.
        price_final: Current price in minor units, None without price data.
        discount_percent: Current discount (0 when not on sale).
        linux: Native Linux build flag.
        categories: Store category descriptions.
        genres: Store genre descriptions.
        release_date_text: Free-text release date.
        coming_soon: Unreleased flag.
    """

    app_id: int
    app_type: str
    name: str
    header_image: str | None = None
    short_description: str | None = None
    is_free: bool = False
    price_final: int | None = None
    discount_percent: int = 0
    linux: bool = False
    categories: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()
    release_date_text: str | None = None
    coming_soon: bool = False

    @property
    def price_overview(self) -> dict[str, Any] | None:
        if self.price_final is None:
            return None
        return {"final": self.price_final, "discount_percent": self.discount_percent}


@dataclass(frozen=True)
class StorePrice:
    """Current storefront price in minor units."""

    final: int
    discount_percent: int = 0


@dataclass(frozen=True)
class ReviewSummary:
    """Aggregated review statistics.

    Attributes:
        positivity: Positive share in percent (0-100).
        label: Qualitative label for the positivity.
        total: Total number of reviews.
    """

    positivity: int
    label: str
    total: int


def extract_max_players(text: str) -> int | None:
    """Finds a maximum player count in store page text.

    Args:
        text: Visible text of a store page.

    Returns:
        The first count a known phrase yields (the upper bound for ranges),
        or None.
    """
    for pattern, fixed in _PLAYER_COUNT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        if fixed is not None:
            return fixed
        groups = [g for g in match.groups() if g]
        value = int(groups[-1])
        if value > 0:
            return value
    return None


class SteamStoreClient(ApiClient):
    """Keyless storefront client with request spacing."""

    name = "Steam Store"

    def __init__(self, min_interval: float = 0.0, country: str | None = None) -> None:
        """Initializes the client.

        Args:
            min_interval: Minimum seconds between two requests.
            country: Storefront country code for prices, storefront default if None.
        """
        super().__init__()
        self.min_interval = min_interval
        self.country = country
        self._last_request = 0.0
        self._rate_lock = threading.Lock()

    def _rate_limit(self) -> None:
        """Sleeps until the minimum interval since the last request has passed."""
        if self.min_interval <= 0:
            return
        with self._rate_lock:
            elapsed = time.monotonic() - self._last_request
            if elapsed < self.min_interval:
                time.sleep(self.min_interval - elapsed)
            self._last_request = time.monotonic()

    def _appdetails(self, app_id: int, **extra: Any) -> Any:
        params: dict[str, Any] = {"appids": app_id, "l": "english", **extra}
        if self.country:
            params["cc"] = self.country

        self._rate_limit()
        data = self._get_json(f"{_STORE_URL}/api/appdetails", params)
        if not isinstance(data, dict):
            return None

        entry = data.get(str(app_id))
        if not isinstance(entry, dict) or not entry.get("success"):
            logger.debug("Steam Store: no details for app %d", app_id)
            return None
        return entry.get("data")

    def get_app_details(self, app_id: int) -> StoreAppDetails | None:
        """Fetches and parses storefront details for one app.

        Args:
            app_id: Steam app ID.

        Returns:
            Parsed details, or None when the store has no data.
        """
        data = self._appdetails(app_id)
        if not isinstance(data, dict):
            return None
        try:
            return self._parse_details(app_id, data)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Steam Store: parse error for app %d: %s", app_id, exc)
            return None

    @staticmethod
    def _parse_details(app_id: int, data: dict[str, Any]) -> StoreAppDetails:
        price = data.get("price_overview") or {}
        platforms = data.get("platforms") or {}
        release = data.get("release_date") or {}
        final = price.get("final")

        return StoreAppDetails(
            app_id=app_id,
            app_type=str(data.get("type", "")),
            name=str(data.get("name") or f"App {app_id}"),
            header_image=data.get("header_image"),
            short_description=data.get("short_description"),
            is_free=bool(data.get("is_free", False)),
            price_final=int(final) if final is not None else None,
            discount_percent=int(price.get("discount_percent") or 0),
            linux=bool(platforms.get("linux", False)),
            categories=tuple(c["description"] for c in data.get("categories") or [] if c.get("description")),
            genres=tuple(g["description"] for g in data.get("genres") or [] if g.get("description")),
            release_date_text=release.get("date") or None,
            coming_soon=bool(release.get("coming_soon", False)),
        )

    def get_price_overview(self, app_id: int) -> StorePrice | None:
        """Fetches only the current price block for an app.

        Returns:
            The price, or None for free apps and apps without price data.
        """
        data = self._appdetails(app_id, filters="price_overview")
        if not isinstance(data, dict):
            return None
        price = data.get("price_overview")
        if not isinstance(price, dict) or price.get("final") is None:
            return None
        try:
            return StorePrice(final=int(price["final"]), discount_percent=int(price.get("discount_percent") or 0))
        except (TypeError, ValueError) as exc:
            logger.warning("Steam Store: malformed price for app %d: %s", app_id, exc)
            return None

    def get_review_summary(self, app_id: int) -> ReviewSummary | None:
        """Fetches aggregated review statistics.

        Returns:
            The summary, or None when there are no reviews or no data.
        """
        self._rate_limit()
        data = self._get_json(
            f"{_STORE_URL}/appreviews/{app_id}",
            {"json": 1, "language": "all", "purchase_type": "all", "num_per_page": 0},
        )
        if not isinstance(data, dict):
            return None

        summary = data.get("query_summary")
        if not isinstance(summary, dict):
            return None
        try:
            total = int(summary.get("total_reviews") or 0)
            positive = int(summary.get("total_positive") or 0)
        except (TypeError, ValueError) as exc:
            logger.warning("Steam Store: malformed review summary for app %d: %s", app_id, exc)
            return None
        if total <= 0:
            return None

        positivity = round_half_up(positive / total * 100)
        return ReviewSummary(positivity=positivity, label=review_label(positivity), total=total)

    def search_app_ids(self, filter_name: str, count: int = 100) -> list[int]:
        """Lists app IDs from a named storefront search filter.

        Args:
            filter_name: Search filter, e.g. "topsellers".
            count: Number of results to request.

        Returns:
            App IDs in listing order, empty on failure.
        """
        data = self._get_json(
            f"{_STORE_URL}/search/results/",
            {"sort_by": "_ASC", "ignore_preferences": 1, "filter": filter_name, "infinite": 1, "count": count},
        )
        if not isinstance(data, dict) or not isinstance(data.get("results_html"), str):
            return []

        soup = BeautifulSoup(data["results_html"], "html.parser")
        app_ids: list[int] = []
        for row in soup.select("[data-ds-appid]"):
            # Bundles list several IDs; the first is the representative app
            first = row["data-ds-appid"].split(",")[0].strip()
            if first.isdigit():
                app_ids.append(int(first))
        return list(dict.fromkeys(app_ids))

    def get_featured_app_ids(self) -> list[int]:
        """Collects app IDs from every featured storefront category."""
        data = self._get_json(f"{_STORE_URL}/api/featuredcategories/")
        if not isinstance(data, dict):
            return []

        app_ids: list[int] = []
        for section in data.values():
            if not isinstance(section, dict):
                continue
            for item in section.get("items") or []:
                if isinstance(item, dict) and isinstance(item.get("id"), int):
                    app_ids.append(item["id"])
        return list(dict.fromkeys(app_ids))

    def get_max_players_hint(self, app_id: int) -> int | None:
        """Scrapes the store page for a stated maximum player count.

        Returns:
            The count, or None if the page is unavailable or says nothing.
        """
        self._rate_limit()
        html = self._get_text(f"{_STORE_URL}/app/{app_id}", headers={"Cookie": _STORE_PAGE_COOKIES})
        if not html:
            return None

        text = BeautifulSoup(html, "html.parser").get_text(" ", strip=True)
        return extract_max_players(text)
