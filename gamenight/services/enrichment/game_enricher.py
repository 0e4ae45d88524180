"""Per-item catalog enrichment shared by every job that inserts games.

Combines storefront details, ProtonDB, reviews and SteamSpy tags into one
canonical games row. Any single gateway miss degrades to a null field;
only a missing or non-game catalog entry, or an unexpected error while
fetching, skips the item.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from gamenight.core.db import StoreError
from gamenight.core.game import LINUX_OK_TIERS
from gamenight.integrations.protondb_api import ProtonDBClient
from gamenight.integrations.steam_store import SteamStoreClient
from gamenight.integrations.steamspy_api import SteamSpyClient
from gamenight.utils.catalog_signals import infer_max_players, is_multiplayer, price_fields
from gamenight.utils.date_utils import parse_release_date, utc_now_iso

logger = logging.getLogger("gamenight.enrichment")

__all__ = ["ADDED", "EnrichmentOutcome", "GameEnricher", "NO_DATA", "SKIPPED"]

ADDED = "added"
SKIPPED = "skipped"
NO_DATA = "no data"


@dataclass(frozen=True)
class EnrichmentOutcome:
    """Result of enriching one app.

    Attributes:
        app_id: Steam app ID.
        name: Display name, "Unknown" when the store had nothing.
        status: "added" or "skipped".
        reason: Why the item was skipped (catalog type, "no data" or the
            store error text).
    """

    app_id: int
    name: str
    status: str
    reason: str | None = None

    @property
    def added(self) -> bool:
        return self.status == ADDED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"externalId": self.app_id, "name": self.name, "status": self.status}
        if self.reason:
            data["reason"] = self.reason
        return data


class GameEnricher:
    """Builds and stores canonical game rows from the gateways."""

    def __init__(
        self,
        store: SteamStoreClient,
        protondb: ProtonDBClient,
        steamspy: SteamSpyClient,
    ) -> None:
        self.store = store
        self.protondb = protondb
        self.steamspy = steamspy

    def build_row(self, app_id: int) -> tuple[dict[str, Any] | None, str, str | None]:
        """Fetches everything known about an app and maps it to a games row.

        Args:
            app_id: Steam app ID.

        Returns:
            ``(row, name, skip_reason)``. ``row`` is None when the item must
            be skipped, in which case ``skip_reason`` says why.
        """
        details = self.store.get_app_details(app_id)
        if details is None:
            return None, "Unknown", NO_DATA
        if details.app_type != "game":
            return None, details.name, details.app_type or NO_DATA

        categories = list(details.categories)
        tier = "native" if details.linux else self.protondb.get_tier(app_id)
        reviews = self.store.get_review_summary(app_id)
        tags = self.steamspy.get_tags(app_id) or list(details.genres)

        row: dict[str, Any] = {
            "steam_app_id": app_id,
            "name": details.name,
            "header_image_url": details.header_image,
            "description": details.short_description,
            "is_multiplayer": is_multiplayer(categories),
            "supports_linux": details.linux or (tier or "") in LINUX_OK_TIERS,
            "protondb_rating": tier,
            "steam_review_score": reviews.positivity if reviews else None,
            "steam_review_desc": reviews.label if reviews else None,
            "steam_review_count": reviews.total if reviews else None,
            "is_free": details.is_free,
            "release_date": parse_release_date(details.release_date_text),
            "is_coming_soon": details.coming_soon,
            "steam_tags": tags,
            "categories": categories,
            "max_players": infer_max_players(categories, tags),
            "last_updated_at": utc_now_iso(),
        }
        row.update(price_fields(details.is_free, details.price_overview))
        return row, details.name, None

    def enrich(self, db: Any, app_id: int, extra: dict[str, Any] | None = None) -> EnrichmentOutcome:
        """Enriches one app and upserts it keyed by its app ID.

        Args:
            db: Database to write to.
            app_id: Steam app ID.
            extra: Additional columns written with the row (e.g. a trending score).

        Returns:
            The outcome. A failed lookup or write is reported as skipped
            with the error text.
        """
        try:
            row, name, reason = self.build_row(app_id)
        except Exception as exc:
            logger.warning("Enrichment failed for app %d: %s", app_id, exc)
            return EnrichmentOutcome(app_id, "Unknown", SKIPPED, str(exc) or type(exc).__name__)

        if row is None:
            logger.info("Skipped app %d (%s): %s", app_id, name, reason)
            return EnrichmentOutcome(app_id, name, SKIPPED, reason)

        if extra:
            row.update(extra)

        try:
            db.upsert("games", row)
        except StoreError as exc:
            logger.warning("Could not store app %d (%s): %s", app_id, name, exc)
            return EnrichmentOutcome(app_id, name, SKIPPED, str(exc))

        logger.info("Added app %d (%s)", app_id, name)
        return EnrichmentOutcome(app_id, name, ADDED)
