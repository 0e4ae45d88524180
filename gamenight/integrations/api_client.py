"""Shared HTTP plumbing for the gateway clients.

Every gateway exposes a narrow read contract: given an app ID (or a small
batch), return a JSON document or fail. ``ApiClient`` maps every failure
mode (non-2xx status, network error, malformed body) to ``None`` so
callers can treat a miss as "no data for this field".
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from gamenight.version import __version__

logger = logging.getLogger("gamenight.api_client")

__all__ = ["ApiClient", "GatewayError"]

_MAX_RETRIES = 3
_BASE_DELAY = 1.0


class GatewayError(Exception):
    """A gateway call the job cannot continue without has failed."""


class ApiClient:
    """Base class holding a configured session and JSON request helpers.

    Subclasses set ``name`` for log messages. A request that answers 429
    is retried with exponential backoff before giving up.
    """

    name = "api"
    timeout: float = 10.0

    def __init__(self) -> None:
        """Initializes the client with a configured session."""
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": f"SteamGameNight/{__version__}"})

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response | None:
        """Sends a request, returning the response only for 2xx answers."""
        for attempt in range(_MAX_RETRIES):
            try:
                response = self._session.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=headers,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                logger.warning("%s: network error for %s: %s", self.name, url, exc)
                return None

            if response.status_code == 429 and attempt < _MAX_RETRIES - 1:
                wait = _BASE_DELAY * (2**attempt)
                logger.warning("%s: rate limited, retrying in %.1fs", self.name, wait)
                time.sleep(wait)
                continue

            if not 200 <= response.status_code < 300:
                logger.warning("%s: unexpected status %d for %s", self.name, response.status_code, url)
                return None

            return response

        return None

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GETs a JSON document.

        Args:
            url: Endpoint URL.
            params: Query parameters.

        Returns:
            The decoded body, or None on any failure.
        """
        return self._decode(self._request("GET", url, params=params), url)

    def _post_json(self, url: str, params: dict[str, Any] | None = None, body: Any = None) -> Any:
        """POSTs a JSON body and decodes the JSON answer."""
        return self._decode(self._request("POST", url, params=params, json_body=body), url)

    def _get_text(self, url: str, headers: dict[str, str] | None = None) -> str | None:
        response = self._request("GET", url, headers=headers)
        return response.text if response is not None else None

    def _decode(self, response: requests.Response | None, url: str) -> Any:
        if response is None:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s: malformed JSON from %s: %s", self.name, url, exc)
            return None
