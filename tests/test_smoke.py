"""Smoke tests – verify all modules are importable and free of syntax errors.

This is an infrastructure test (not a unit test), so it lives in the tests
root rather than under ``tests/unit/``.
"""

from __future__ import annotations

import importlib
import sys

import pytest

# ---------------------------------------------------------------------------
# Module lists
# ---------------------------------------------------------------------------

CORE_MODULES: list[str] = [
    "gamenight.core.db",
    "gamenight.core.db.connection",
    "gamenight.core.db.models",
    "gamenight.core.db.player_queries",
    "gamenight.core.db.schema",
    "gamenight.core.db.sync_log_queries",
    "gamenight.core.db.table_queries",
    "gamenight.core.game",
    "gamenight.core.local_store",
    "gamenight.core.logging",
    "gamenight.core.player",
    "gamenight.core.sync_log",
]

SERVICE_MODULES: list[str] = [
    "gamenight.services.annotation_registers",
    "gamenight.services.dashboard",
    "gamenight.services.data_access",
    "gamenight.services.enrichment.game_enricher",
    "gamenight.services.filter_constants",
    "gamenight.services.filter_service",
    "gamenight.services.ownership_service",
    "gamenight.services.recommendation",
    "gamenight.services.sort_service",
    "gamenight.services.sync.base_job",
    "gamenight.services.sync.discovery_job",
    "gamenight.services.sync.library_sync_job",
    "gamenight.services.sync.max_players_backfill_job",
    "gamenight.services.sync.player_count_sync_job",
    "gamenight.services.sync.price_sync_job",
    "gamenight.services.sync.registry",
    "gamenight.services.sync.trending_sync_job",
    "gamenight.services.tab_config",
    "gamenight.services.theme_service",
]

UTILS_MODULES: list[str] = [
    "gamenight.utils.catalog_signals",
    "gamenight.utils.date_utils",
    "gamenight.utils.json_utils",
]

INTEGRATION_MODULES: list[str] = [
    "gamenight.integrations.api_client",
    "gamenight.integrations.itad_api",
    "gamenight.integrations.protondb_api",
    "gamenight.integrations.steam_store",
    "gamenight.integrations.steam_web_api",
    "gamenight.integrations.steamspy_api",
]

TOP_LEVEL_MODULES: list[str] = [
    "gamenight.config",
    "gamenight.main",
    "gamenight.version",
    "gamenight.web.app",
    "gamenight.web.auth",
    "gamenight.web.routes",
]


# ---------------------------------------------------------------------------
# Parametrized import tests
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("module_path", CORE_MODULES)
def test_import_core_modules(module_path: str) -> None:
    """Core module must be importable without errors."""
    importlib.import_module(module_path)


@pytest.mark.parametrize("module_path", SERVICE_MODULES)
def test_import_service_modules(module_path: str) -> None:
    """Service module must be importable without errors."""
    importlib.import_module(module_path)


@pytest.mark.parametrize("module_path", UTILS_MODULES)
def test_import_utils_modules(module_path: str) -> None:
    """Utils module must be importable without errors."""
    importlib.import_module(module_path)


@pytest.mark.parametrize("module_path", INTEGRATION_MODULES)
def test_import_integration_modules(module_path: str) -> None:
    """Integration module must be importable without errors."""
    importlib.import_module(module_path)


@pytest.mark.parametrize("module_path", TOP_LEVEL_MODULES)
def test_import_top_level_modules(module_path: str) -> None:
    """Top-level module must be importable without errors."""
    importlib.import_module(module_path)


# ---------------------------------------------------------------------------
# Circular import check
# ---------------------------------------------------------------------------


def test_no_circular_imports() -> None:
    """All modules can be imported in a fresh subprocess without cycles.

    Uses subprocess isolation to avoid corrupting module references for
    other tests in the same session.
    """
    import subprocess

    all_modules = CORE_MODULES + SERVICE_MODULES + UTILS_MODULES + INTEGRATION_MODULES + TOP_LEVEL_MODULES
    import_lines = "; ".join(f"import {m}" for m in all_modules)
    result = subprocess.run(
        [sys.executable, "-c", import_lines],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0, f"Circular import detected:\nstderr: {result.stderr}"


# ---------------------------------------------------------------------------
# Version smoke test
# ---------------------------------------------------------------------------


def test_version_is_set() -> None:
    from gamenight.version import __app_name__, __version__

    assert __app_name__ == "Steam Game Night"
    assert __version__.count(".") == 2
