"""Base class for all ingestion jobs.

Provides the sync-log bookkeeping, the wall-clock budget and the run()
template. Subclasses implement _execute() and optionally override
_writes_sync_log().
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from gamenight.core.db import StoreError
from gamenight.core.sync_log import STATUS_ERROR, STATUS_SUCCESS

__all__ = ["BaseSyncJob", "JobResult"]

logger = logging.getLogger("gamenight.sync.base")


@dataclass
class JobResult:
    """HTTP-shaped job outcome: a status code and a JSON-ready body."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class BaseSyncJob:
    """Template base class for ingestion jobs.

    ``run()`` opens a sync log row, calls ``_execute()`` and closes the row.
    Any exception escaping ``_execute()`` is job-fatal: it is logged, written
    to the sync log as an error and returned as a 500 carrying the partial
    counters collected in ``self.progress``.

    Attributes:
        sync_type: Name written to the sync log.
        time_budget: Seconds of work allowed per invocation.
        progress: Counters updated by subclasses while they work.
    """

    sync_type: str = ""

    def __init__(
        self,
        db: Any,
        *,
        time_budget: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initializes the job.

        Args:
            db: Database instance.
            time_budget: Wall-clock budget per invocation in seconds.
            clock: Monotonic clock, injectable for tests.
        """
        self.db = db
        self.time_budget = time_budget
        self._clock = clock
        self._started = 0.0
        self.progress: dict[str, Any] = {}

    def run(self, payload: dict[str, Any] | None = None) -> JobResult:
        """Template method: log, execute, log.

        Args:
            payload: Optional request body (continuation state).

        Returns:
            The job result.
        """
        payload = payload or {}
        self._started = self._clock()
        self.progress = {}
        log_id: str | None = None

        try:
            if self._writes_sync_log(payload):
                log_id = self.db.open_sync_log(self.sync_type)

            body = self._execute(payload)

            if log_id is not None:
                self.db.close_sync_log(log_id, STATUS_SUCCESS, self._games_updated(body))
            logger.info("%s job finished: %s", self.sync_type, self._summary(body))
            return JobResult(200, body)

        except Exception as exc:
            logger.exception("%s job failed", self.sync_type)
            if log_id is not None:
                try:
                    self.db.close_sync_log(log_id, STATUS_ERROR, self._games_updated(self.progress), str(exc))
                except StoreError as log_exc:
                    logger.error("Could not record failure of %s job: %s", self.sync_type, log_exc)
            return JobResult(500, {"error": str(exc), **self.progress})

    # ── Subclasses MUST override these ──────────────────

    def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Do the work and return the JSON summary.

        Raises:
            NotImplementedError: Subclass must implement.
        """
        raise NotImplementedError

    # ── Subclasses MAY override these ────────────────────

    def _writes_sync_log(self, payload: dict[str, Any]) -> bool:
        """Whether this invocation records a sync log row."""
        return True

    # ── Helpers ──────────────────────────────────────────

    def _time_left(self) -> bool:
        """True while the invocation is inside its wall-clock budget."""
        return self._clock() - self._started < self.time_budget

    def _lookup(self, fetch: Callable[[Any], Any], key: Any) -> Any:
        """Calls one per-item gateway lookup; a failure is a miss, not a job failure."""
        try:
            return fetch(key)
        except Exception as exc:
            logger.warning("%s: lookup for %r failed: %s", self.sync_type, key, exc)
            return None

    def _update_game(self, game_id: str, patch: dict[str, Any]) -> bool:
        """Writes a patch to one game; a failed write is logged, not raised."""
        try:
            return self.db.update("games", patch, (("id", "eq", game_id),)) > 0
        except StoreError as exc:
            logger.warning("%s: could not update game %s: %s", self.sync_type, game_id, exc)
            return False

    @staticmethod
    def _games_updated(body: dict[str, Any]) -> int:
        return int(body.get("gamesUpdated", body.get("added", 0)) or 0)

    @staticmethod
    def _summary(body: dict[str, Any]) -> str:
        return ", ".join(f"{key}={value}" for key, value in body.items() if isinstance(value, (int, float, str, bool)))
