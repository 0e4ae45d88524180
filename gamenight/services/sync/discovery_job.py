"""Catalog discovery with a continuation protocol.

A call without ``pendingAppIds`` fans out to the listing endpoints, drops
app IDs the store already has and returns the rest as the pending worklist.
A call with ``pendingAppIds`` enriches a small slice and returns the
unprocessed remainder for the caller to submit again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from gamenight.integrations.steam_store import DISCOVERY_SEARCH_FILTERS, SteamStoreClient
from gamenight.integrations.steamspy_api import SteamSpyClient
from gamenight.services.enrichment.game_enricher import EnrichmentOutcome, GameEnricher
from gamenight.services.sync.base_job import BaseSyncJob, JobResult

logger = logging.getLogger("gamenight.sync.discovery")

__all__ = ["DiscoveryJob", "drain_discovery", "parse_pending_app_ids"]


def parse_pending_app_ids(payload: dict[str, Any]) -> list[int]:
    """Reads the pending worklist from a request body.

    Non-integer entries are dropped; duplicates keep their first position.

    Raises:
        ValueError: If ``pendingAppIds`` is present but not a list.
    """
    raw = payload.get("pendingAppIds")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("pendingAppIds must be a list of app IDs")

    app_ids: list[int] = []
    for value in raw:
        if isinstance(value, bool):
            continue
        try:
            app_ids.append(int(value))
        except (TypeError, ValueError):
            logger.debug("Ignoring invalid pending app ID %r", value)
    return list(dict.fromkeys(app_ids))


class DiscoveryJob(BaseSyncJob):
    """Discovers new catalog candidates and enriches them slice by slice."""

    sync_type = "discovery"

    def __init__(
        self,
        db: Any,
        store: SteamStoreClient,
        steamspy: SteamSpyClient,
        enricher: GameEnricher,
        *,
        batch_size: int = 5,
        scheduled_limit: int = 10,
        min_average_2weeks: int = 3000,
        **kwargs: Any,
    ) -> None:
        super().__init__(db, **kwargs)
        self.store = store
        self.steamspy = steamspy
        self.enricher = enricher
        self.batch_size = max(1, batch_size)
        self.scheduled_limit = max(1, scheduled_limit)
        self.min_average_2weeks = min_average_2weeks

    def run_scheduled(self) -> JobResult:
        """Discovers and enriches up to ``scheduled_limit`` items in one call."""
        return self.run({"scheduled": True})

    def _writes_sync_log(self, payload: dict[str, Any]) -> bool:
        # Plain discovery only reads
        return bool(payload.get("scheduled")) or bool(parse_pending_app_ids(payload))

    def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        if payload.get("scheduled"):
            return self._scheduled()

        pending = parse_pending_app_ids(payload)
        if not pending:
            return self._discover()
        return self._process(pending, self.batch_size)

    # ── Phase 1: discovery ───────────────────────────────

    def _sources(self) -> list[tuple[str, Callable[[], list[int]]]]:
        sources: list[tuple[str, Callable[[], list[int]]]] = [
            (name, lambda name=name: self.store.search_app_ids(name)) for name in DISCOVERY_SEARCH_FILTERS
        ]
        sources.append(("featured", self.store.get_featured_app_ids))
        sources.append(("steamspy-2weeks", self._steamspy_top_played))
        sources.append(("steamspy-owned", self._steamspy_top_owned))
        return sources

    def _steamspy_top_played(self) -> list[int]:
        entries = self.steamspy.get_top_in_two_weeks() or []
        return [e.app_id for e in entries if e.average_2weeks >= self.min_average_2weeks]

    def _steamspy_top_owned(self) -> list[int]:
        return [e.app_id for e in self.steamspy.get_top_owned() or []]

    def discover_app_ids(self) -> list[int]:
        """Queries every listing source concurrently.

        Returns:
            Deduplicated app IDs in source order. A failing source
            contributes nothing.
        """
        sources = self._sources()
        with ThreadPoolExecutor(max_workers=len(sources)) as pool:
            futures = [(name, pool.submit(fetch)) for name, fetch in sources]

        discovered: list[int] = []
        for name, future in futures:
            try:
                found = future.result()
            except Exception as exc:
                logger.warning("Discovery source %s failed: %s", name, exc)
                continue
            logger.debug("Discovery source %s returned %d app(s)", name, len(found))
            discovered.extend(found)
        return list(dict.fromkeys(discovered))

    def _existing_app_ids(self) -> set[int]:
        rows = self.db.select_all("games", order=(("steam_app_id", True),))
        return {row["steam_app_id"] for row in rows}

    def _discover(self) -> dict[str, Any]:
        discovered = self.discover_app_ids()
        existing = self._existing_app_ids()
        pending = [app_id for app_id in discovered if app_id not in existing]

        return {
            "phase": "discovered",
            "totalDiscovered": len(discovered),
            "alreadyInDB": len(discovered) - len(pending),
            "pendingAppIds": pending,
            "totalInDB": len(existing),
        }

    # ── Phase 2: enrichment ──────────────────────────────

    def _process(self, pending: list[int], limit: int) -> dict[str, Any]:
        batch, remainder = pending[:limit], pending[limit:]
        results: list[EnrichmentOutcome] = []
        self.progress = {"added": 0, "skipped": 0}

        for index, app_id in enumerate(batch):
            # At least one item per call so the protocol always advances
            if results and not self._time_left():
                remainder = batch[index:] + remainder
                logger.info("Time budget reached after %d item(s)", len(results))
                break

            outcome = self.enricher.enrich(self.db, app_id)
            results.append(outcome)
            self.progress["added" if outcome.added else "skipped"] += 1

        return {
            "phase": "processing",
            "results": [outcome.to_dict() for outcome in results],
            "pendingAppIds": remainder,
            "remaining": len(remainder),
            "added": self.progress["added"],
            "skipped": self.progress["skipped"],
        }

    def _scheduled(self) -> dict[str, Any]:
        discovered = self._discover()
        processed = self._process(discovered["pendingAppIds"], self.scheduled_limit)
        return {
            "phase": "scheduled",
            "totalDiscovered": discovered["totalDiscovered"],
            "alreadyInDB": discovered["alreadyInDB"],
            "results": processed["results"],
            "added": processed["added"],
            "skipped": processed["skipped"],
            "remaining": processed["remaining"],
        }


def drain_discovery(
    job: DiscoveryJob,
    on_round: Callable[[dict[str, Any]], None] | None = None,
) -> dict[str, Any]:
    """Drives the continuation protocol until nothing is pending.

    Args:
        job: The discovery job.
        on_round: Called with each round's body, e.g. for progress output.

    Returns:
        Totals across all rounds.

    Raises:
        RuntimeError: If any round fails.
    """
    totals = {"rounds": 0, "totalDiscovered": 0, "added": 0, "skipped": 0}

    result = job.run()
    if not result.ok:
        raise RuntimeError(result.body.get("error", "discovery failed"))
    totals["totalDiscovered"] = result.body.get("totalDiscovered", 0)
    pending = result.body.get("pendingAppIds", [])

    while pending:
        result = job.run({"pendingAppIds": pending})
        if not result.ok:
            raise RuntimeError(result.body.get("error", "discovery round failed"))
        totals["rounds"] += 1
        totals["added"] += result.body["added"]
        totals["skipped"] += result.body["skipped"]
        if on_round is not None:
            on_round(result.body)
        pending = result.body["pendingAppIds"]

    return totals
