from __future__ import annotations

from gamenight.services.sync.base_job import BaseSyncJob, JobResult
from gamenight.services.sync.discovery_job import DiscoveryJob, drain_discovery
from gamenight.services.sync.library_sync_job import LibrarySyncJob
from gamenight.services.sync.max_players_backfill_job import MaxPlayersBackfillJob
from gamenight.services.sync.player_count_sync_job import PlayerCountSyncJob
from gamenight.services.sync.price_sync_job import PriceSyncJob
from gamenight.services.sync.registry import JOB_NAMES, JobFactory
from gamenight.services.sync.trending_sync_job import TrendingSyncJob

__all__: list[str] = [
    "BaseSyncJob",
    "DiscoveryJob",
    "JOB_NAMES",
    "JobFactory",
    "JobResult",
    "LibrarySyncJob",
    "MaxPlayersBackfillJob",
    "PlayerCountSyncJob",
    "PriceSyncJob",
    "TrendingSyncJob",
    "drain_discovery",
]
