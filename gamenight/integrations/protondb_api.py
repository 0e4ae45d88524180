"""ProtonDB summaries: how well a Windows-only game runs under Proton."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gamenight.integrations.api_client import ApiClient

logger = logging.getLogger("gamenight.protondb_api")

__all__ = ["ProtonDBClient", "ProtonDBResult"]

SUMMARY_URL = "https://www.protondb.com/api/v1/reports/summaries/{app_id}.json"


@dataclass(frozen=True)
class ProtonDBResult:
    """Community verdict for one app.

    ``tier`` is the lower-cased headline tier that ends up in the
    ``games.proton_tier`` column; the rest is kept for logging.
    """

    tier: str
    confidence: str = ""
    trending_tier: str = ""
    score: float = 0.0
    total_reports: int = 0

    @classmethod
    def from_summary(cls, summary: dict) -> ProtonDBResult:
        return cls(
            tier=str(summary["tier"]).lower(),
            confidence=str(summary.get("confidence") or ""),
            trending_tier=str(summary.get("trendingTier") or "").lower(),
            score=float(summary.get("score") or 0.0),
            total_reports=int(summary.get("total") or 0),
        )


class ProtonDBClient(ApiClient):
    """Anonymous reader for ProtonDB report summaries.

    Apps nobody has reported on answer 404, which the base client turns
    into ``None``.
    """

    name = "ProtonDB"

    def get_rating(self, app_id: int) -> ProtonDBResult | None:
        summary = self._get_json(SUMMARY_URL.format(app_id=app_id))
        if not isinstance(summary, dict) or not summary.get("tier"):
            logger.debug("no ProtonDB summary for app %d", app_id)
            return None
        try:
            result = ProtonDBResult.from_summary(summary)
        except (TypeError, ValueError) as exc:
            logger.warning("unreadable ProtonDB summary for app %d: %s", app_id, exc)
            return None
        logger.debug("app %d runs %s on Proton (%d reports)", app_id, result.tier, result.total_reports)
        return result

    def get_tier(self, app_id: int) -> str | None:
        """Headline tier only, the one value the catalog stores."""
        result = self.get_rating(app_id)
        return None if result is None else result.tier
