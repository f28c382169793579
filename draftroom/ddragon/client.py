# ddragon/client.py

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from draftroom.config import settings

log = logging.getLogger(__name__)


class DataDragonError(Exception):
    """Raised when Data Dragon answers with an unexpected payload or status."""
    pass


class DataDragonClient:
    """Async client for the public Data Dragon CDN (no API key, no quota)."""

    def __init__(self, base_url: str = settings.DDRAGON_BASE_URL, locale: str = settings.DDRAGON_LOCALE):
        self.base_url = base_url.rstrip("/")
        self.locale = locale
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=10)
            )
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @retry(
        retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _request(self, url: str) -> Any:
        """
        GET a JSON document, retrying network errors.

        Raises:
            DataDragonError: on 404 or malformed JSON
            aiohttp.ClientError: when every attempt failed
        """
        session = await self._get_session()
        async with session.get(url) as resp:
            if resp.status == 404:
                raise DataDragonError(f"404 Not Found: {url}")
            resp.raise_for_status()
            try:
                return await resp.json(content_type=None)
            except ValueError as e:
                raise DataDragonError(f"Invalid JSON from {url}") from e

    async def get_latest_version(self) -> str:
        """Latest game version, e.g. "15.13.1"."""
        versions = await self._request(f"{self.base_url}/api/versions.json")
        if not isinstance(versions, list) or not versions:
            raise DataDragonError("Empty versions list")
        return versions[0]

    async def get_champions(self, version: str) -> List[Dict[str, Any]]:
        """Champion summaries (id, key, name, image…) for ``version``."""
        url = f"{self.base_url}/cdn/{version}/data/{self.locale}/champion.json"
        payload = await self._request(url)
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise DataDragonError(f"Unexpected champion.json payload for {version}")
        return list(data.values())

    def champion_icon_url(self, version: str, image_file: str) -> str:
        return f"{self.base_url}/cdn/{version}/img/champion/{image_file}"
