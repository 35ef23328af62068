"""
tajweed.py — Fetch tajweed-annotated Quran text from alquran.cloud.

Cache strategy:
  1. In-memory LRU cache (max 500 entries) of successful upstream payloads.
  2. On miss: fetch from the API and store the payload.

Failed fetches are never cached.
"""
import logging

import httpx

from config import QURAN_API, QURAN_API_TOKEN, TAJWEED_EDITION, UPSTREAM_TIMEOUT
from core.errors import UpstreamError
from core.utils import make_verse_key
from utils import LRUCache

logger = logging.getLogger(__name__)


class TajweedClient:
    """Async client for the tajweed edition of the upstream Quran API."""

    def __init__(
        self,
        base_url: str = QURAN_API,
        edition: str = TAJWEED_EDITION,
        timeout: float = UPSTREAM_TIMEOUT,
        token: str = QURAN_API_TOKEN,
        transport: httpx.AsyncBaseTransport | None = None,
        cache_size: int = 500,
    ):
        self.base_url = base_url.rstrip("/")
        self.edition = edition
        self.timeout = timeout
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._transport = transport
        self._cache = LRUCache(max_size=cache_size)

    async def _get(self, path: str) -> dict:
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            ) as client:
                response = await client.get(path)
        except httpx.HTTPError as e:
            logger.error(f"Tajweed API request failed for {path}: {e}")
            raise UpstreamError(f"Tajweed API request failed for {path}") from e

        if response.status_code != 200:
            logger.error(f"Tajweed API returned HTTP {response.status_code} for {path}")
            raise UpstreamError(f"Tajweed API returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Tajweed API returned invalid JSON for {path}: {e}")
            raise UpstreamError("Tajweed API returned invalid JSON") from e

        if not isinstance(data, dict) or data.get("code") != 200 or not data.get("data"):
            logger.error(f"Tajweed API returned an error payload for {path}: {str(data)[:200]}")
            raise UpstreamError("Tajweed API returned an error payload")

        self._cache.set(path, data)
        return data

    async def fetch_ayah(self, ref: str) -> dict:
        """
        Fetch one ayah of the tajweed edition.

        Args:
            ref: "surah:ayah" key or global ayah number

        Returns:
            Upstream JSON payload, unchanged.
        """
        return await self._get(f"/ayah/{ref}/{self.edition}")

    async def fetch_surah(self, number: int) -> dict:
        """Fetch a whole surah of the tajweed edition; upstream JSON unchanged."""
        return await self._get(f"/surah/{number}/{self.edition}")

    async def get_ayah_text(self, surah: int, ayah: int) -> str | None:
        """Annotated text of one ayah, or None if the provider is unavailable."""
        try:
            payload = await self.fetch_ayah(make_verse_key(surah, ayah))
        except UpstreamError as e:
            logger.warning(f"Tajweed text unavailable for {surah}:{ayah}: {e}")
            return None
        return payload["data"].get("text") or None
