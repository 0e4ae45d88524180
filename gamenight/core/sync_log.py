"""Sync log record written by every ingestion job run."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "STATUS_ERROR",
    "STATUS_RUNNING",
    "STATUS_SUCCESS",
    "SyncLog",
]

STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass
class SyncLog:
    """One job run: opened as running, closed as success or error."""

    id: str
    sync_type: str
    status: str = STATUS_RUNNING
    error: str | None = None
    games_updated: int = 0
    started_at: str | None = None
    finished_at: str | None = None

    @property
    def is_finished(self) -> bool:
        return self.status != STATUS_RUNNING
