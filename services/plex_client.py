"""Plex artwork fetching."""
from __future__ import annotations

from typing import Optional

import httpx

from core.config import AppConfig
from core.errors import FetchError
from utils.http import DEFAULT_TIMEOUT, http_get_bytes
from utils.logger import get_logger

logger = get_logger(__name__)


class PlexArtworkClient:
    """Fetches raw artwork bytes (thumb/grandparentThumb paths) from a Plex server."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, config: AppConfig, client: Optional[httpx.Client] = None) -> "PlexArtworkClient":
        return cls(
            base_url=config.plex_host,
            token=config.plex_token,
            timeout=config.fetch_timeout,
            client=client,
        )

    def build_url(self, reference: str) -> str:
        if not reference.startswith("/"):
            reference = "/" + reference
        return self.base_url + reference

    def fetch(self, reference: str) -> bytes:
        """Download artwork for a Plex path such as ``/library/metadata/1/thumb``."""
        if not reference:
            raise FetchError("Empty artwork reference")

        url = self.build_url(reference)
        # Token goes in the query string only; never log it.
        logger.debug(f"Fetching artwork → {url}")
        data = http_get_bytes(
            url,
            params={"X-Plex-Token": self._token},
            timeout=self.timeout,
            client=self._client,
        )
        if not data:
            raise FetchError(f"Empty response body from {url}")
        logger.debug(f"Fetched {len(data)} bytes from {url}")
        return data
