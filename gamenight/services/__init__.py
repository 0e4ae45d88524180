from __future__ import annotations

from gamenight.services.dashboard import Dashboard
from gamenight.services.data_access import DataAccess
from gamenight.services.filter_service import FilterService, FilterState
from gamenight.services.ownership_service import build_games_with_ownership
from gamenight.services.recommendation import calculate_recommendation_score

__all__: list[str] = [
    "Dashboard",
    "DataAccess",
    "FilterService",
    "FilterState",
    "build_games_with_ownership",
    "calculate_recommendation_score",
]
