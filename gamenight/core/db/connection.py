"""SQLite connection shared by every entry point of the app.

Opens the catalog database, applies PRAGMAs and fans committed writes
out to table subscribers.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger("gamenight.database")

__all__ = ["ChangeCallback", "ConnectionBase"]

ChangeCallback = Callable[[str, str], None]


class ConnectionBase:
    """Owns the catalog connection and its change listeners.

    Runs in WAL mode with foreign keys on. _ensure_schema() comes from
    SchemaMixin, so the tables exist before the first query.

    The connection is shared between threads (the web surface serves
    requests on a pool); every statement runs under ``self.lock``.
    """

    SCHEMA_VERSION = 2

    conn: sqlite3.Connection
    db_path: Path

    def __init__(self, db_path: Path) -> None:
        """Open (creating if needed) the catalog database.

        Args:
            db_path: SQLite file; its directory is created on demand.
        """
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.lock = threading.RLock()
        self._subscribers: dict[str, list[tuple[frozenset[str], ChangeCallback]]] = {}

        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.conn.execute("PRAGMA journal_mode = WAL")

        self._ensure_schema()

    def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        events: tuple[str, ...] = ("*",),
    ) -> Callable[[], None]:
        """Registers a callback for committed writes to a table.

        Args:
            table: Table to watch.
            callback: Called with ``(table, event)`` after each write, where
                event is INSERT, UPDATE or DELETE.
            events: Event names to receive, ``"*"`` for all.

        Returns:
            A function that removes the subscription.
        """
        entry = (frozenset(event.upper() for event in events), callback)
        with self.lock:
            self._subscribers.setdefault(table, []).append(entry)

        def unsubscribe() -> None:
            with self.lock:
                listeners = self._subscribers.get(table, [])
                if entry in listeners:
                    listeners.remove(entry)

        return unsubscribe

    def _notify(self, table: str, event: str) -> None:
        """Delivers a change event to the table's subscribers."""
        with self.lock:
            listeners = list(self._subscribers.get(table, []))

        for events, callback in listeners:
            if "*" in events or event in events:
                try:
                    callback(table, event)
                except Exception:
                    logger.exception("Change listener for %s failed", table)

    def commit(self) -> None:
        """Flush any open write transaction."""
        with self.lock:
            self.conn.commit()

    def close(self) -> None:
        """Release the connection; listeners are left registered."""
        with self.lock:
            self.conn.close()

    def __enter__(self) -> ConnectionBase:
        """Use as ``with Database(path) as db:``."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Commit, then close."""
        self.commit()
        self.close()
