"""Database schema creation and migrations.

Creates the catalog, player, ownership and sync-log tables and applies
version migrations on older databases.
"""

from __future__ import annotations

import logging
import sqlite3
import time

logger = logging.getLogger("gamenight.database")

__all__ = ["SCHEMA_SQL", "SchemaMixin"]

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at INTEGER NOT NULL,
    description TEXT
);

CREATE TABLE IF NOT EXISTS players (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    steam_id TEXT NOT NULL UNIQUE,
    steam_profile_url TEXT,
    avatar_url TEXT,
    is_primary INTEGER NOT NULL DEFAULT 0,
    last_synced_at TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS games (
    id TEXT PRIMARY KEY,
    steam_app_id INTEGER NOT NULL UNIQUE,
    name TEXT NOT NULL,
    header_image_url TEXT,
    description TEXT,
    is_multiplayer INTEGER NOT NULL DEFAULT 0,
    max_players INTEGER,
    min_players INTEGER,
    supports_linux INTEGER NOT NULL DEFAULT 0,
    protondb_rating TEXT,
    has_active_servers INTEGER NOT NULL DEFAULT 1,
    servers_deprecated INTEGER NOT NULL DEFAULT 0,
    steam_review_score INTEGER,
    steam_review_desc TEXT,
    steam_review_count INTEGER,
    opencritic_score INTEGER,
    opencritic_tier TEXT,
    steam_price_cents INTEGER,
    best_price_cents INTEGER,
    best_price_store TEXT,
    best_price_url TEXT,
    is_free INTEGER NOT NULL DEFAULT 0,
    is_on_sale INTEGER NOT NULL DEFAULT 0,
    sale_percent INTEGER,
    release_date TEXT,
    is_coming_soon INTEGER NOT NULL DEFAULT 0,
    steam_tags TEXT NOT NULL DEFAULT '[]',
    categories TEXT NOT NULL DEFAULT '[]',
    trending_score INTEGER,
    current_players INTEGER,
    player_count_updated_at TEXT,
    price_checked_at TEXT,
    last_updated_at TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS player_games (
    id TEXT PRIMARY KEY,
    player_id TEXT NOT NULL REFERENCES players(id) ON DELETE CASCADE,
    game_id TEXT NOT NULL REFERENCES games(id) ON DELETE CASCADE,
    playtime_hours REAL NOT NULL DEFAULT 0,
    last_played_at TEXT,
    UNIQUE(player_id, game_id)
);

CREATE TABLE IF NOT EXISTS sync_log (
    id TEXT PRIMARY KEY,
    sync_type TEXT NOT NULL,
    status TEXT NOT NULL,
    error TEXT,
    games_updated INTEGER NOT NULL DEFAULT 0,
    started_at TEXT,
    finished_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_games_trending ON games(trending_score);
CREATE INDEX IF NOT EXISTS idx_games_player_count_updated ON games(player_count_updated_at);
CREATE INDEX IF NOT EXISTS idx_player_games_game ON player_games(game_id);
CREATE INDEX IF NOT EXISTS idx_sync_log_started ON sync_log(started_at);
"""


class SchemaMixin:
    """Mixin providing schema creation and migration logic.

    Requires ConnectionBase attributes: conn, SCHEMA_VERSION.
    """

    def _ensure_schema(self) -> None:
        """Create or migrate database schema."""
        current_version = self._get_schema_version()

        if current_version == 0:
            self._create_schema()
            self._set_schema_version(self.SCHEMA_VERSION, "initial schema")
        elif current_version < self.SCHEMA_VERSION:
            self._migrate(current_version, self.SCHEMA_VERSION)

    def _get_schema_version(self) -> int:
        """Get current database schema version."""
        try:
            cursor = self.conn.execute("SELECT MAX(version) FROM schema_version")
            result = cursor.fetchone()
            return result[0] if result[0] is not None else 0
        except sqlite3.OperationalError:
            return 0

    def _set_schema_version(self, version: int, description: str) -> None:
        """Set database schema version."""
        self.conn.execute(
            """
            INSERT OR REPLACE INTO schema_version (version, applied_at, description)
            VALUES (?, ?, ?)
            """,
            (version, int(time.time()), description),
        )
        self.conn.commit()

    def _create_schema(self) -> None:
        """Create the current schema from scratch."""
        try:
            self.conn.executescript(SCHEMA_SQL)
            self.conn.commit()
            logger.info("Database schema created at %s", self.db_path)
        except sqlite3.Error as e:
            logger.error("Could not create database schema: %s", e)
            raise

    def _migrate(self, from_version: int, to_version: int) -> None:
        """Migrate database schema.

        Args:
            from_version: Current schema version.
            to_version: Target schema version.
        """
        logger.info(
            "Migrating database from version %d to %d",
            from_version,
            to_version,
        )

        if from_version < 2:
            self._migrate_to_v2()
            self._set_schema_version(2, "price_checked_at column")

    def _migrate_to_v2(self) -> None:
        """Migrate to schema v2: dedicated price rotation timestamp."""
        try:
            self.conn.execute("ALTER TABLE games ADD COLUMN price_checked_at TEXT")
        except sqlite3.OperationalError:
            pass  # Column already exists
        self.conn.commit()
        logger.info("Migrated to schema v2: price_checked_at column")
