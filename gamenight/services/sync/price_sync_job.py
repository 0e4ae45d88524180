"""Price sync: best third-party deal per game, on a rotation.

The worklist is the Linux-playable, non-deprecated, paid games whose price
was checked longest ago. Phase one resolves IsThereAnyDeal IDs in
parallel, phase two fetches all current deals in one overview call. Every
worklist item gets a fresh ``price_checked_at`` so the rotation moves on
even when no deal is found.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from gamenight.integrations.itad_api import ITADClient
from gamenight.integrations.steam_store import SteamStoreClient
from gamenight.services.sync.base_job import BaseSyncJob, JobResult
from gamenight.utils.date_utils import utc_now_iso

logger = logging.getLogger("gamenight.sync.prices")

__all__ = ["PriceSyncJob"]


class PriceSyncJob(BaseSyncJob):
    """Refreshes best prices for a batch of games."""

    sync_type = "prices"

    def __init__(
        self,
        db: Any,
        itad: ITADClient | None,
        store: SteamStoreClient | None = None,
        *,
        batch_size: int = 20,
        refresh_sales: bool = False,
        max_workers: int = 8,
        **kwargs: Any,
    ) -> None:
        super().__init__(db, **kwargs)
        self.itad = itad
        self.store = store
        self.batch_size = max(1, batch_size)
        self.refresh_sales = refresh_sales
        self.max_workers = max_workers

    def run(self, payload: dict[str, Any] | None = None) -> JobResult:
        if self.itad is None:
            logger.info("Price sync skipped: no IsThereAnyDeal API key configured")
            return JobResult(200, {"skipped": True, "reason": "No ITAD API key configured"})
        return super().run(payload)

    def _worklist(self) -> list[dict[str, Any]]:
        return self.db.select(
            "games",
            filters=(
                ("supports_linux", "eq", True),
                ("servers_deprecated", "eq", False),
                ("is_free", "eq", False),
            ),
            order=(("price_checked_at", True, True), ("steam_app_id", True)),
            range_=(0, self.batch_size - 1),
        )

    def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        games = self._worklist()
        self.progress = {"gamesUpdated": 0, "batch": len(games)}
        if not games:
            return {"success": True, "gamesUpdated": 0, "batch": 0}

        with ThreadPoolExecutor(max_workers=min(len(games), self.max_workers)) as pool:
            itad_ids = list(pool.map(lambda game: self._lookup(self.itad.lookup_id, game["steam_app_id"]), games))

        resolved = {itad_id: game for game, itad_id in zip(games, itad_ids) if itad_id}
        deals = self.itad.get_overview(list(resolved)) if resolved else {}

        checked_at = utc_now_iso()
        for game, itad_id in zip(games, itad_ids):
            patch: dict[str, Any] = {"price_checked_at": checked_at}
            deal = deals.get(itad_id) if itad_id else None
            if deal is not None:
                patch.update(
                    {
                        "best_price_cents": deal.price_cents,
                        "best_price_store": deal.shop,
                        "best_price_url": deal.url,
                    }
                )
            if self._update_game(game["id"], patch) and deal is not None:
                self.progress["gamesUpdated"] += 1

        sales_refreshed = self._refresh_store_sales(games) if self.refresh_sales and self.store else 0

        return {
            "success": True,
            "gamesUpdated": self.progress["gamesUpdated"],
            "batch": len(games),
            "resolved": len(resolved),
            "salesRefreshed": sales_refreshed,
        }

    def _refresh_store_sales(self, games: list[dict[str, Any]]) -> int:
        """Re-polls the storefront price for sale-percent drift."""
        refreshed = 0
        for game in games:
            if not self._time_left():
                break
            price = self._lookup(self.store.get_price_overview, game["steam_app_id"])
            if price is None:
                continue
            patch = {
                "steam_price_cents": price.final,
                "is_on_sale": price.discount_percent > 0,
                "sale_percent": price.discount_percent or None,
            }
            if self._update_game(game["id"], patch):
                refreshed += 1
        return refreshed
