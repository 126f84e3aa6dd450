"""Async HTTP utilities with connection pooling and retry."""

import asyncio
import json
from typing import Optional, Any

import aiohttp

from utils.logging_config import get_logger

logger = get_logger("async_http")

# Default timeout configuration
DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=20, connect=5, sock_read=12)

# Retry configuration
DEFAULT_RETRIES = 2
DEFAULT_BACKOFF_FACTOR = 0.3
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class AsyncHTTPClient:
    """Shared async HTTP client with connection pooling and retry handling."""

    def __init__(
        self,
        concurrency_limit: int = 10,
        per_host_limit: int = 5,
        timeout: aiohttp.ClientTimeout = None,
        headers: dict = None,
    ):
        self._concurrency_limit = concurrency_limit
        self._per_host_limit = per_host_limit
        self._timeout = timeout or DEFAULT_TIMEOUT
        self._headers = headers or {"User-Agent": "Hunt-Radar/1.0"}
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self._concurrency_limit,
                limit_per_host=self._per_host_limit,
            )
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                connector=connector,
                headers=self._headers,
            )
        return self._session

    async def request(
        self,
        method: str,
        url: str,
        headers: dict = None,
        params: dict = None,
        json_body: Any = None,
        max_retries: int = DEFAULT_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    ) -> Optional[bytes]:
        """Send a request with retry on 429/5xx. Returns response body bytes."""
        session = await self._get_session()
        for attempt in range(max_retries):
            try:
                async with session.request(
                    method, url, headers=headers, params=params, json=json_body
                ) as resp:
                    if resp.status == 200:
                        return await resp.read()
                    elif resp.status in RETRY_STATUS_CODES:
                        if resp.status == 429:
                            retry_after = resp.headers.get("Retry-After", "5")
                            try:
                                wait = min(int(retry_after), 30)
                            except ValueError:
                                wait = 5
                        else:
                            wait = backoff_factor * (2 ** attempt)
                        logger.warning(
                            "HTTP %d for %s %s, retry in %.1fs",
                            resp.status, method, url, wait,
                        )
                        if attempt < max_retries - 1:
                            await asyncio.sleep(wait)
                    else:
                        logger.warning("HTTP %d for %s %s", resp.status, method, url)
                        return None
            except asyncio.TimeoutError:
                if attempt < max_retries - 1:
                    wait = backoff_factor * (2 ** attempt)
                    logger.warning("Timeout for %s, retry in %.1fs", url, wait)
                    await asyncio.sleep(wait)
                else:
                    logger.error("All retries timed out for %s", url)
                    return None
            except aiohttp.ClientError as e:
                if attempt < max_retries - 1:
                    wait = backoff_factor * (2 ** attempt)
                    logger.warning("Request error for %s: %s, retry in %.1fs", url, e, wait)
                    await asyncio.sleep(wait)
                else:
                    logger.error("All retries failed for %s: %s", url, e)
                    return None
        return None

    async def post_json(
        self,
        url: str,
        payload: Any,
        headers: dict = None,
        max_retries: int = DEFAULT_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    ) -> Optional[Any]:
        """Async POST a JSON payload and parse the JSON response."""
        data = await self.request(
            "POST", url, headers=headers, json_body=payload,
            max_retries=max_retries, backoff_factor=backoff_factor,
        )
        return self._decode(url, data)

    @staticmethod
    def _decode(url: str, data: Optional[bytes]) -> Optional[Any]:
        if data is None:
            return None
        try:
            return json.loads(data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.error("JSON parse error for %s: %s", url, e)
            return None

    async def close(self):
        """Close the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
