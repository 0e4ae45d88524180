"""
Configuration for the game night dashboard and its ingestion jobs.
Values come from defaults, then settings.json in the data directory,
then environment variables (a local .env file is honoured).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger("gamenight.config")


__all__ = ["Config", "config"]


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """
    Central configuration handling for the application.
    Manages paths, API keys, the shared job secret and job tuning knobs.
    """

    APP_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: Path | None = None

    SETTINGS_FILE: Path | None = None
    DATABASE_FILE: Path | None = None
    LOCAL_STATE_FILE: Path | None = None
    LOG_FILE: Path | None = None
    LOG_LEVEL: str = "INFO"

    # API KEYS
    STEAM_API_KEY: str | None = None
    ITAD_API_KEY: str | None = None
    ITAD_COUNTRY: str = "GB"

    # Shared secret for job triggers. Unset means the surface is open.
    CRON_SECRET: str | None = None

    # Job tuning
    STORE_API_DELAY: float = 0.2
    JOB_TIME_BUDGET: float = 10.0
    DISCOVERY_BATCH_SIZE: int = 5
    SCHEDULED_DISCOVERY_LIMIT: int = 10
    PRICE_BATCH_SIZE: int = 20
    PLAYER_COUNT_BATCH_SIZE: int = 50
    BACKFILL_BATCH_SIZE: int = 25
    STEAMSPY_MIN_AVERAGE_2WEEKS: int = 3000
    ENRICH_TRENDING_MISSING: bool = True
    REFRESH_STORE_SALES: bool = False

    # Player seed list: [{"name": ..., "steam_id": ..., "is_primary": bool}]
    PLAYERS: list[dict] = None

    def __post_init__(self):
        """Resolve derived paths and load settings after instantiation."""
        load_dotenv()

        if self.DATA_DIR is None:
            env_dir = os.getenv("GAMENIGHT_DATA_DIR")
            self.DATA_DIR = Path(env_dir) if env_dir else self.APP_DIR / "data"
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)

        if self.SETTINGS_FILE is None:
            self.SETTINGS_FILE = self.DATA_DIR / "settings.json"
        if self.DATABASE_FILE is None:
            self.DATABASE_FILE = self.DATA_DIR / "gamenight.db"
        if self.LOCAL_STATE_FILE is None:
            self.LOCAL_STATE_FILE = self.DATA_DIR / "local_state.json"

        if self.PLAYERS is None:
            self.PLAYERS = []

        self._load_settings()
        self._load_env()

    def _load_settings(self) -> None:
        """Load settings from JSON file."""
        if not self.SETTINGS_FILE.exists():
            return

        try:
            with open(self.SETTINGS_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read settings from %s: %s", self.SETTINGS_FILE, e)
            return

        if not isinstance(data, dict):
            logger.error("Ignoring settings file %s: expected an object", self.SETTINGS_FILE)
            return

        self.STEAM_API_KEY = data.get("steam_api_key", self.STEAM_API_KEY)
        self.ITAD_API_KEY = data.get("itad_api_key", self.ITAD_API_KEY)
        self.ITAD_COUNTRY = data.get("itad_country", self.ITAD_COUNTRY)
        self.LOG_LEVEL = data.get("log_level", self.LOG_LEVEL)
        self.STORE_API_DELAY = data.get("store_api_delay", self.STORE_API_DELAY)
        self.JOB_TIME_BUDGET = data.get("job_time_budget", self.JOB_TIME_BUDGET)
        self.DISCOVERY_BATCH_SIZE = data.get("discovery_batch_size", self.DISCOVERY_BATCH_SIZE)
        self.SCHEDULED_DISCOVERY_LIMIT = data.get("scheduled_discovery_limit", self.SCHEDULED_DISCOVERY_LIMIT)
        self.PRICE_BATCH_SIZE = data.get("price_batch_size", self.PRICE_BATCH_SIZE)
        self.PLAYER_COUNT_BATCH_SIZE = data.get("player_count_batch_size", self.PLAYER_COUNT_BATCH_SIZE)
        self.BACKFILL_BATCH_SIZE = data.get("backfill_batch_size", self.BACKFILL_BATCH_SIZE)
        self.STEAMSPY_MIN_AVERAGE_2WEEKS = data.get("steamspy_min_average_2weeks", self.STEAMSPY_MIN_AVERAGE_2WEEKS)
        self.ENRICH_TRENDING_MISSING = data.get("enrich_trending_missing", self.ENRICH_TRENDING_MISSING)
        self.REFRESH_STORE_SALES = data.get("refresh_store_sales", self.REFRESH_STORE_SALES)
        self.PLAYERS = data.get("players", self.PLAYERS)

        log_file = data.get("log_file")
        if log_file:
            self.LOG_FILE = Path(log_file)

    def _load_env(self) -> None:
        """Environment variables win over settings.json."""
        for name in ("STEAM_API_KEY", "ITAD_API_KEY", "ITAD_COUNTRY", "CRON_SECRET", "LOG_LEVEL"):
            value = os.getenv(name)
            if value:
                setattr(self, name, value)

        budget = os.getenv("JOB_TIME_BUDGET")
        if budget:
            try:
                self.JOB_TIME_BUDGET = float(budget)
            except ValueError:
                logger.warning("Ignoring invalid JOB_TIME_BUDGET=%r", budget)

        refresh_sales = os.getenv("REFRESH_STORE_SALES")
        if refresh_sales:
            self.REFRESH_STORE_SALES = _env_bool(refresh_sales)

    def save(self) -> None:
        """Save current configuration to JSON file.

        The job secret is runtime-only and never written to disk.
        """
        data = {
            "steam_api_key": self.STEAM_API_KEY,
            "itad_api_key": self.ITAD_API_KEY,
            "itad_country": self.ITAD_COUNTRY,
            "log_level": self.LOG_LEVEL,
            "log_file": str(self.LOG_FILE) if self.LOG_FILE else "",
            "store_api_delay": self.STORE_API_DELAY,
            "job_time_budget": self.JOB_TIME_BUDGET,
            "discovery_batch_size": self.DISCOVERY_BATCH_SIZE,
            "scheduled_discovery_limit": self.SCHEDULED_DISCOVERY_LIMIT,
            "price_batch_size": self.PRICE_BATCH_SIZE,
            "player_count_batch_size": self.PLAYER_COUNT_BATCH_SIZE,
            "backfill_batch_size": self.BACKFILL_BATCH_SIZE,
            "steamspy_min_average_2weeks": self.STEAMSPY_MIN_AVERAGE_2WEEKS,
            "enrich_trending_missing": self.ENRICH_TRENDING_MISSING,
            "refresh_store_sales": self.REFRESH_STORE_SALES,
            "players": self.PLAYERS,
        }

        try:
            with open(self.SETTINGS_FILE, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error("Could not save settings to %s: %s", self.SETTINGS_FILE, e)


config = Config()
