# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator
from itertools import count
from typing import Any
from unittest.mock import MagicMock

import pytest

from gamenight.config import Config
from gamenight.core.db import Database
from gamenight.core.game import Game
from gamenight.core.local_store import LocalStore
from gamenight.core.player import Player
from gamenight.integrations.steam_store import ReviewSummary, StoreAppDetails
from gamenight.services.enrichment import GameEnricher

_ENV_KEYS = (
    "CRON_SECRET",
    "STEAM_API_KEY",
    "ITAD_API_KEY",
    "ITAD_COUNTRY",
    "LOG_LEVEL",
    "JOB_TIME_BUDGET",
    "REFRESH_STORE_SALES",
    "GAMENIGHT_DATA_DIR",
)


@pytest.fixture
def database(tmp_path) -> Generator[Database, None, None]:
    """Fresh store backed by a temp file."""
    db = Database(tmp_path / "test_gamenight.db")
    yield db
    db.close()


@pytest.fixture
def local_store(tmp_path) -> LocalStore:
    """Empty client-local store backed by a temp JSON file."""
    return LocalStore(tmp_path / "local_state.json")


@pytest.fixture
def test_config(tmp_path, monkeypatch) -> Config:
    """Config rooted in a temp data dir with no keys or secret from the environment."""
    for name in _ENV_KEYS:
        monkeypatch.delenv(name, raising=False)
    cfg = Config(DATA_DIR=tmp_path / "data")
    cfg.CRON_SECRET = None
    cfg.STEAM_API_KEY = None
    cfg.ITAD_API_KEY = None
    return cfg


@pytest.fixture
def players() -> list[Player]:
    """Three players; the first two are primary."""
    return [
        Player(id="p-alice", name="Alice", steam_id="76561190000000001", is_primary=True),
        Player(id="p-bob", name="Bob", steam_id="76561190000000002", is_primary=True),
        Player(id="p-carol", name="Carol", steam_id="76561190000000003"),
    ]


@pytest.fixture
def seeded_database(database: Database) -> Database:
    """Store with three seeded players."""
    database.seed_players(
        [
            {"name": "Alice", "steam_id": "76561190000000001", "is_primary": True},
            {"name": "Bob", "steam_id": "76561190000000002", "is_primary": True},
            {"name": "Carol", "steam_id": "76561190000000003"},
        ]
    )
    return database


@pytest.fixture
def make_game() -> Callable[..., Game]:
    """Factory for catalog entries with unique IDs and app IDs."""
    numbers = count(1)

    def factory(name: str = "Test Game", **kwargs: Any) -> Game:
        n = next(numbers)
        kwargs.setdefault("steam_app_id", 1000 + n)
        kwargs.setdefault("id", f"game-{n}")
        return Game(name=name, **kwargs)

    return factory


@pytest.fixture
def make_details() -> Callable[..., StoreAppDetails]:
    """Factory for storefront details of a co-op game."""

    def factory(app_id: int, name: str | None = None, **kwargs: Any) -> StoreAppDetails:
        kwargs.setdefault("app_type", "game")
        kwargs.setdefault("categories", ("Single-player", "Online Co-op", "Co-op"))
        kwargs.setdefault("genres", ("Action",))
        kwargs.setdefault("price_final", 1999)
        kwargs.setdefault("release_date_text", "21 Dec, 2020")
        return StoreAppDetails(app_id=app_id, name=name or f"Game {app_id}", **kwargs)

    return factory


@pytest.fixture
def fake_store(make_details) -> MagicMock:
    """Storefront double answering every app as a priced co-op game."""
    store = MagicMock()
    store.get_app_details.side_effect = lambda app_id: make_details(app_id)
    store.get_review_summary.return_value = ReviewSummary(positivity=91, label="Very Positive", total=5000)
    store.search_app_ids.return_value = []
    store.get_featured_app_ids.return_value = []
    store.get_max_players_hint.return_value = None
    return store


@pytest.fixture
def fake_protondb() -> MagicMock:
    protondb = MagicMock()
    protondb.get_tier.return_value = "gold"
    return protondb


@pytest.fixture
def fake_steamspy() -> MagicMock:
    steamspy = MagicMock()
    steamspy.get_tags.return_value = ["Co-op", "Survival"]
    steamspy.get_top_in_two_weeks.return_value = []
    steamspy.get_top_owned.return_value = []
    return steamspy


@pytest.fixture
def enricher(fake_store, fake_protondb, fake_steamspy) -> GameEnricher:
    return GameEnricher(fake_store, fake_protondb, fake_steamspy)


@pytest.fixture
def add_game(database: Database) -> Callable[..., str]:
    """Inserts a catalog row and returns its surrogate ID."""

    def factory(app_id: int, name: str | None = None, **columns: Any) -> str:
        row = database.upsert("games", {"steam_app_id": app_id, "name": name or f"Game {app_id}", **columns})
        return row["id"]

    return factory


def _game_row(db: Database, app_id: int) -> dict[str, Any]:
    """Reads one catalog row by app ID."""
    return db.select("games", filters=(("steam_app_id", "eq", app_id),))[0]


@pytest.fixture
def read_game(database: Database) -> Callable[[int], dict[str, Any]]:
    return lambda app_id: _game_row(database, app_id)
