"""Builds ingestion jobs with their gateway clients from the configuration."""

from __future__ import annotations

import logging
from typing import Any

from gamenight.config import Config
from gamenight.integrations.itad_api import ITADClient
from gamenight.integrations.protondb_api import ProtonDBClient
from gamenight.integrations.steam_store import SteamStoreClient
from gamenight.integrations.steam_web_api import SteamWebAPI
from gamenight.integrations.steamspy_api import SteamSpyClient
from gamenight.services.enrichment.game_enricher import GameEnricher
from gamenight.services.sync.base_job import BaseSyncJob
from gamenight.services.sync.discovery_job import DiscoveryJob
from gamenight.services.sync.library_sync_job import LibrarySyncJob
from gamenight.services.sync.max_players_backfill_job import MaxPlayersBackfillJob
from gamenight.services.sync.player_count_sync_job import PlayerCountSyncJob
from gamenight.services.sync.price_sync_job import PriceSyncJob
from gamenight.services.sync.trending_sync_job import TrendingSyncJob

logger = logging.getLogger("gamenight.sync.registry")

__all__ = ["JOB_NAMES", "JobFactory"]

JOB_NAMES: tuple[str, ...] = (
    "discover-games",
    "sync-libraries",
    "sync-prices",
    "sync-trending",
    "sync-player-counts",
    "backfill-max-players",
)


class JobFactory:
    """Creates fresh job instances sharing one set of gateway clients.

    Clients can be passed in (tests inject fakes); the rest are built from
    the configuration on first use.
    """

    def __init__(self, db: Any, config: Config, **clients: Any) -> None:
        self.db = db
        self.config = config
        self._clients: dict[str, Any] = dict(clients)

    def _client(self, name: str) -> Any:
        if name not in self._clients:
            self._clients[name] = self._build_client(name)
        return self._clients[name]

    def _build_client(self, name: str) -> Any:
        if name == "store":
            return SteamStoreClient(min_interval=self.config.STORE_API_DELAY)
        if name == "web_api":
            return SteamWebAPI(self.config.STEAM_API_KEY)
        if name == "steamspy":
            return SteamSpyClient()
        if name == "protondb":
            return ProtonDBClient()
        if name == "itad":
            if not self.config.ITAD_API_KEY:
                return None
            return ITADClient(self.config.ITAD_API_KEY, self.config.ITAD_COUNTRY)
        raise KeyError(name)

    @property
    def enricher(self) -> GameEnricher:
        if "enricher" not in self._clients:
            self._clients["enricher"] = GameEnricher(
                self._client("store"), self._client("protondb"), self._client("steamspy")
            )
        return self._clients["enricher"]

    def create(self, name: str) -> BaseSyncJob:
        """Creates the named job.

        Args:
            name: One of JOB_NAMES.

        Raises:
            KeyError: For an unknown job name.
        """
        budget = {"time_budget": self.config.JOB_TIME_BUDGET}

        if name == "discover-games":
            return DiscoveryJob(
                self.db,
                self._client("store"),
                self._client("steamspy"),
                self.enricher,
                batch_size=self.config.DISCOVERY_BATCH_SIZE,
                scheduled_limit=self.config.SCHEDULED_DISCOVERY_LIMIT,
                min_average_2weeks=self.config.STEAMSPY_MIN_AVERAGE_2WEEKS,
                **budget,
            )
        if name == "sync-libraries":
            return LibrarySyncJob(self.db, self._client("web_api"), self.enricher, **budget)
        if name == "sync-prices":
            return PriceSyncJob(
                self.db,
                self._client("itad"),
                self._client("store"),
                batch_size=self.config.PRICE_BATCH_SIZE,
                refresh_sales=self.config.REFRESH_STORE_SALES,
                **budget,
            )
        if name == "sync-trending":
            return TrendingSyncJob(
                self.db,
                self._client("steamspy"),
                self.enricher,
                enrich_missing=self.config.ENRICH_TRENDING_MISSING,
                **budget,
            )
        if name == "sync-player-counts":
            return PlayerCountSyncJob(
                self.db,
                self._client("web_api"),
                batch_size=self.config.PLAYER_COUNT_BATCH_SIZE,
                **budget,
            )
        if name == "backfill-max-players":
            return MaxPlayersBackfillJob(
                self.db,
                self._client("store"),
                batch_size=self.config.BACKFILL_BATCH_SIZE,
                **budget,
            )
        raise KeyError(f"Unknown job: {name}")
