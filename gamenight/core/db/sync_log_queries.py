"""Sync log bookkeeping for ingestion job runs."""

from __future__ import annotations

import logging

from gamenight.core.db.models import row_to_sync_log
from gamenight.core.sync_log import STATUS_RUNNING, SyncLog
from gamenight.utils.date_utils import utc_now_iso

logger = logging.getLogger("gamenight.database")

__all__ = ["SyncLogQueryMixin"]


class SyncLogQueryMixin:
    """Mixin providing sync log writes and lookups.

    Requires TableQueryMixin methods: insert, update, select.
    """

    def open_sync_log(self, sync_type: str) -> str:
        """Records the start of a job run.

        Args:
            sync_type: Job name (libraries, prices, trending, ...).

        Returns:
            The new sync log ID.
        """
        row = self.insert(
            "sync_log",
            {"sync_type": sync_type, "status": STATUS_RUNNING, "started_at": utc_now_iso()},
        )
        return row["id"]

    def close_sync_log(
        self,
        log_id: str,
        status: str,
        games_updated: int = 0,
        error: str | None = None,
    ) -> None:
        """Records the outcome of a job run."""
        self.update(
            "sync_log",
            {
                "status": status,
                "games_updated": games_updated,
                "error": error,
                "finished_at": utc_now_iso(),
            },
            (("id", "eq", log_id),),
        )

    def latest_sync_log(self, status: str | None = None) -> SyncLog | None:
        """Most recently started run, optionally restricted to one status."""
        filters = (("status", "eq", status),) if status else ()
        rows = self.select("sync_log", filters=filters, order=(("started_at", False),), range_=(0, 0))
        return row_to_sync_log(rows[0]) if rows else None
