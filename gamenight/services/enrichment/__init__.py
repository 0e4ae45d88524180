from __future__ import annotations

from gamenight.services.enrichment.game_enricher import EnrichmentOutcome, GameEnricher

__all__: list[str] = ["EnrichmentOutcome", "GameEnricher"]
