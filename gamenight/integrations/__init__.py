from __future__ import annotations

__all__: list[str] = [
    "ApiClient",
    "GatewayError",
    "ITADClient",
    "ProtonDBClient",
    "SteamSpyClient",
    "SteamStoreClient",
    "SteamWebAPI",
]

from gamenight.integrations.api_client import ApiClient, GatewayError
from gamenight.integrations.itad_api import ITADClient
from gamenight.integrations.protondb_api import ProtonDBClient
from gamenight.integrations.steam_store import SteamStoreClient
from gamenight.integrations.steam_web_api import SteamWebAPI
from gamenight.integrations.steamspy_api import SteamSpyClient
