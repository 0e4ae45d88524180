# gamenight/services/tab_config.py

"""Versioned dashboard configuration with per-tab overrides.

The configuration is persisted under ``gaming-decisions-config``. Loading
reads the raw blob, migrates known legacy shapes step by step, then merges
every field over a fresh default so fields added later always get a value.
Malformed blobs or fields fall back to the defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from gamenight.core.local_store import LocalStore
from gamenight.services.filter_constants import (
    ALL_GAME_MODE_KEYS,
    DEFAULT_SORT_KEY,
    AppTab,
    ProtonFilter,
    ReleaseDateFilter,
    SortKey,
)
from gamenight.services.sort_service import normalize_sort_keys

logger = logging.getLogger("gamenight.tab_config")

__all__ = [
    "AppConfig",
    "CONFIG_NAMESPACE",
    "CONFIG_VERSION",
    "TabDefaults",
    "load_app_config",
    "migrate_config",
    "save_app_config",
]

CONFIG_NAMESPACE = "config"
CONFIG_VERSION = 2

# Keys a tab override may carry
_TAB_FIELDS = ("sort_keys", "linux_only", "release_date_filter", "game_modes", "exclude_tags", "proton_filter")

# camelCase game-mode keys of version 1 blobs
_LEGACY_MODE_KEYS = {
    "multiplayer": "multiplayer",
    "coop": "coop",
    "singlePlayer": "single_player",
    "localMultiplayer": "local_multiplayer",
}

# camelCase field names of version 1 blobs
_LEGACY_FIELDS = {
    "minReviewCount": "min_review_count",
    "defaultLinuxOnly": "linux_only",
    "defaultReleaseDateFilter": "release_date_filter",
    "defaultGameModes": "game_modes",
    "defaultExcludeTags": "exclude_tags",
    "defaultSortBy": "sort_keys",
    "defaultProtonFilter": "proton_filter",
    "tabs": "tabs",
}


@dataclass(frozen=True)
class TabDefaults:
    """Resolved filter defaults for one tab."""

    sort_keys: tuple[SortKey, ...] = (DEFAULT_SORT_KEY,)
    linux_only: bool = False
    release_date_filter: ReleaseDateFilter = ReleaseDateFilter.ALL
    game_modes: frozenset[str] = frozenset({"multiplayer", "coop"})
    exclude_tags: tuple[str, ...] = ("Massively Multiplayer",)
    proton_filter: ProtonFilter = ProtonFilter.ALL


@dataclass
class AppConfig:
    """User configuration of the dashboard.

    Attributes:
        min_review_count: Reviews a game needs to appear in quick picks.
        defaults: Defaults shared by every tab.
        tabs: Per-tab overrides of individual default fields.
    """

    min_review_count: int = 150
    defaults: TabDefaults = field(default_factory=TabDefaults)
    tabs: dict[AppTab, dict[str, Any]] = field(default_factory=dict)
    version: int = CONFIG_VERSION

    def resolve_tab(self, tab: AppTab) -> TabDefaults:
        """Merges the tab's overrides over the shared defaults."""
        overrides = self.tabs.get(tab)
        if not overrides:
            return self.defaults
        return replace(self.defaults, **overrides)

    def set_tab_override(self, tab: AppTab, **overrides: Any) -> None:
        """Sets override fields for a tab; values are validated like loaded ones."""
        parsed = _parse_tab_fields(overrides, self.defaults)
        self.tabs.setdefault(tab, {}).update(parsed)

    def clear_tab_override(self, tab: AppTab) -> None:
        self.tabs.pop(tab, None)

    def to_dict(self) -> dict[str, Any]:
        """Serializes to the current persisted shape."""
        data: dict[str, Any] = {"version": self.version, "min_review_count": self.min_review_count}
        data.update(_dump_tab_fields(vars(self.defaults)))
        data["tabs"] = {tab.value: _dump_tab_fields(values) for tab, values in self.tabs.items() if values}
        return data

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> AppConfig:
        """Builds a config from a current-version blob, field by field."""
        base = TabDefaults()
        min_reviews = raw.get("min_review_count", 150)
        if not isinstance(min_reviews, int) or isinstance(min_reviews, bool) or min_reviews < 0:
            logger.warning("Invalid min_review_count %r, using default", min_reviews)
            min_reviews = 150

        defaults = replace(base, **_parse_tab_fields(raw, base))

        tabs: dict[AppTab, dict[str, Any]] = {}
        raw_tabs = raw.get("tabs", {})
        if isinstance(raw_tabs, Mapping):
            for name, values in raw_tabs.items():
                try:
                    tab = AppTab(name)
                except ValueError:
                    logger.warning("Ignoring config for unknown tab %r", name)
                    continue
                if isinstance(values, Mapping):
                    parsed = _parse_tab_fields(values, defaults)
                    if parsed:
                        tabs[tab] = parsed

        return cls(min_review_count=min_reviews, defaults=defaults, tabs=tabs)


def _parse_tab_fields(raw: Mapping[str, Any], fallback: TabDefaults) -> dict[str, Any]:
    """Validates the tab fields present in raw; invalid ones are dropped."""
    parsed: dict[str, Any] = {}
    parsers: dict[str, Callable[[Any], Any]] = {
        "sort_keys": _parse_sort_keys,
        "linux_only": _parse_bool,
        "release_date_filter": ReleaseDateFilter,
        "game_modes": _parse_game_modes,
        "exclude_tags": _parse_tags,
        "proton_filter": ProtonFilter,
    }
    for name in _TAB_FIELDS:
        if name not in raw:
            continue
        try:
            parsed[name] = parsers[name](raw[name])
        except (TypeError, ValueError) as exc:
            logger.warning("Invalid config value for %s (%s), using %r", name, exc, getattr(fallback, name))
    return parsed


def _parse_sort_keys(value: Any) -> tuple[SortKey, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise TypeError("sort keys must be a list")
    return tuple(normalize_sort_keys(value))


def _parse_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError("expected a boolean")
    return value


def _parse_game_modes(value: Any) -> frozenset[str]:
    if isinstance(value, Mapping):
        value = [key for key, enabled in value.items() if enabled]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise TypeError("game modes must be a list")
    return frozenset(str(mode) for mode in value) & ALL_GAME_MODE_KEYS


def _parse_tags(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise TypeError("tags must be a list")
    return tuple(dict.fromkeys(str(tag) for tag in value))


def _dump_tab_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    dumped: dict[str, Any] = {}
    for name in _TAB_FIELDS:
        if name not in values:
            continue
        value = values[name]
        if name == "sort_keys":
            dumped[name] = [key.value for key in value]
        elif name in ("release_date_filter", "proton_filter"):
            dumped[name] = value.value
        elif name == "game_modes":
            dumped[name] = sorted(value)
        elif name == "exclude_tags":
            dumped[name] = list(value)
        else:
            dumped[name] = value
    return dumped


def _migrate_v1(raw: dict[str, Any]) -> dict[str, Any]:
    """camelCase keys, a single sort string and a game-mode object."""
    migrated: dict[str, Any] = {}
    for key, value in raw.items():
        name = _LEGACY_FIELDS.get(key, key)
        if name == "game_modes" and isinstance(value, Mapping):
            value = [_LEGACY_MODE_KEYS.get(mode, mode) for mode, enabled in value.items() if enabled]
        elif name == "sort_keys" and isinstance(value, str):
            value = [value]
        migrated[name] = value
    migrated["version"] = 2
    return migrated


# version -> step that upgrades a blob of that version by one
_MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {1: _migrate_v1}


def migrate_config(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Upgrades a persisted blob to the current version.

    Blobs without a version are treated as version 1.

    Args:
        raw: The persisted blob.

    Returns:
        A current-version blob (fields may still be invalid).
    """
    data = dict(raw)
    version = data.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool):
        version = 1

    while version < CONFIG_VERSION:
        step = _MIGRATIONS.get(version)
        if step is None:
            break
        logger.info("Migrating dashboard config from version %d", version)
        data = step(data)
        version = data.get("version", version + 1)
    return data


def load_app_config(store: LocalStore) -> AppConfig:
    """Loads the configuration; anything unreadable yields the defaults."""
    raw = store.get(CONFIG_NAMESPACE)
    if raw is None:
        return AppConfig()
    if not isinstance(raw, Mapping):
        logger.warning("Dashboard config is not an object, using defaults")
        return AppConfig()
    return AppConfig.from_dict(migrate_config(raw))


def save_app_config(store: LocalStore, config: AppConfig) -> bool:
    """Persists the configuration in the current shape."""
    return store.set(CONFIG_NAMESPACE, config.to_dict())
