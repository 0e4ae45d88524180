"""Tests for per-item catalog enrichment."""

from __future__ import annotations

from unittest.mock import MagicMock

from gamenight.core.db import Database, StoreError
from gamenight.services.enrichment import EnrichmentOutcome, GameEnricher


class TestEnrich:
    """Tests for GameEnricher.enrich()."""

    def test_adds_full_row(self, database: Database, enricher: GameEnricher, read_game) -> None:
        outcome = enricher.enrich(database, 730)

        assert outcome == EnrichmentOutcome(730, "Game 730", "added")
        row = read_game(730)
        assert row["protondb_rating"] == "gold"
        assert row["supports_linux"] is True
        assert row["is_multiplayer"] is True
        assert row["steam_review_score"] == 91
        assert row["steam_review_desc"] == "Very Positive"
        assert row["steam_review_count"] == 5000
        assert row["steam_tags"] == ["Co-op", "Survival"]
        assert row["categories"] == ["Single-player", "Online Co-op", "Co-op"]
        assert row["max_players"] == 4
        assert row["steam_price_cents"] == 1999
        assert row["is_on_sale"] is False
        assert row["release_date"] == "2020-12-21"
        assert row["last_updated_at"] is not None

    def test_native_build_skips_protondb(
        self, database: Database, enricher: GameEnricher, fake_store, fake_protondb, make_details, read_game
    ) -> None:
        fake_store.get_app_details.side_effect = lambda app_id: make_details(app_id, linux=True)

        enricher.enrich(database, 730)

        assert read_game(730)["protondb_rating"] == "native"
        fake_protondb.get_tier.assert_not_called()

    def test_missing_details_skipped(self, database: Database, enricher: GameEnricher, fake_store) -> None:
        fake_store.get_app_details.side_effect = None
        fake_store.get_app_details.return_value = None

        outcome = enricher.enrich(database, 730)

        assert outcome.to_dict() == {"externalId": 730, "name": "Unknown", "status": "skipped", "reason": "no data"}
        assert database.count("games") == 0

    def test_non_game_skipped_with_its_type(
        self, database: Database, enricher: GameEnricher, fake_store, make_details
    ) -> None:
        fake_store.get_app_details.side_effect = lambda app_id: make_details(app_id, name="Soundtrack", app_type="music")

        outcome = enricher.enrich(database, 731)

        assert outcome.added is False
        assert outcome.reason == "music"
        assert outcome.name == "Soundtrack"

    def test_gateway_misses_degrade_to_nulls(
        self, database: Database, enricher: GameEnricher, fake_store, fake_protondb, fake_steamspy, read_game
    ) -> None:
        fake_store.get_review_summary.return_value = None
        fake_protondb.get_tier.return_value = None
        fake_steamspy.get_tags.return_value = None

        assert enricher.enrich(database, 730).added

        row = read_game(730)
        assert row["steam_review_score"] is None
        assert row["protondb_rating"] is None
        assert row["supports_linux"] is False
        assert row["steam_tags"] == ["Action"]

    def test_free_game_price(self, database: Database, enricher: GameEnricher, fake_store, make_details, read_game) -> None:
        fake_store.get_app_details.side_effect = lambda app_id: make_details(app_id, is_free=True, price_final=None)
        enricher.enrich(database, 730)
        row = read_game(730)
        assert row["is_free"] is True
        assert row["steam_price_cents"] == 0

    def test_extra_columns_written(self, database: Database, enricher: GameEnricher, read_game) -> None:
        enricher.enrich(database, 730, extra={"trending_score": 97})
        assert read_game(730)["trending_score"] == 97

    def test_existing_row_refreshed_in_place(
        self, database: Database, enricher: GameEnricher, add_game, read_game
    ) -> None:
        game_id = add_game(730, "Old Name", current_players=1234)

        enricher.enrich(database, 730)

        row = read_game(730)
        assert row["id"] == game_id
        assert row["name"] == "Game 730"
        assert row["current_players"] == 1234

    def test_write_failure_reported_as_skip(self, enricher: GameEnricher) -> None:
        db = MagicMock()
        db.upsert.side_effect = StoreError("disk full")

        outcome = enricher.enrich(db, 730)

        assert outcome.status == "skipped"
        assert outcome.reason == "disk full"

    def test_unexpected_gateway_error_reported_as_skip(
        self, database: Database, enricher: GameEnricher, fake_protondb
    ) -> None:
        fake_protondb.get_tier.side_effect = AttributeError("'list' object has no attribute 'get'")

        outcome = enricher.enrich(database, 730)

        assert outcome.status == "skipped"
        assert outcome.name == "Unknown"
        assert outcome.reason == "'list' object has no attribute 'get'"
        assert database.count("games") == 0


class TestOutcome:
    def test_to_dict_omits_empty_reason(self) -> None:
        assert EnrichmentOutcome(1, "A", "added").to_dict() == {"externalId": 1, "name": "A", "status": "added"}
