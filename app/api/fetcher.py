"""Resilient fetch layer: direct request first, anti-bot bypass relay on 429/403."""

import asyncio
import logging
import random
from typing import Optional

import httpx

from app.config import Settings
from app.errors import NetworkError, RateLimitedError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

BLOCKED_STATUSES = (403, 429)


class ResilientFetcher:
    """Fetches upstream pages with a single bypass-relay fallback.

    - Direct GET with browser-like headers and the caller's timeout.
    - 429/403: the same URL is requested once through the ScraperAPI relay;
      without a relay key a ``RateLimitedError`` is raised instead.
    - Anything else (timeouts, DNS, 5xx) surfaces as ``NetworkError``;
      there is no retry beyond the relay fallback.
    """

    def __init__(self, config: Settings, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "ResilientFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def relay_available(self) -> bool:
        return bool(self.config.scraper_api_key)

    async def fetch(
        self,
        url: str,
        timeout: Optional[float] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        """Fetch ``url`` and return the successful response."""
        timeout = timeout or self.config.scrape_timeout_seconds
        logger.debug(f"Fetching: {url}")

        try:
            response = await self.client.get(
                url,
                headers={**DEFAULT_HEADERS, **(headers or {})},
                timeout=timeout,
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}", url=url) from e

        if response.status_code in BLOCKED_STATUSES:
            logger.warning(f"Rate limited/blocked ({response.status_code}) on {url}, trying bypass relay")
            return await self.fetch_via_relay(url, status_code=response.status_code)

        if response.is_error:
            raise NetworkError(
                f"Request to {url} failed with HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response

    async def fetch_via_relay(self, url: str, status_code: Optional[int] = None) -> httpx.Response:
        """Fetch ``url`` through the ScraperAPI relay (non-rendering by default)."""
        if not self.relay_available:
            logger.warning("SCRAPER_API_KEY not set, cannot bypass rate limiting")
            raise RateLimitedError(
                "Rate limited and no scraping API available",
                url=url,
                status_code=status_code,
            )

        params = {
            "api_key": self.config.scraper_api_key,
            "url": url,
            "render": "true" if self.config.scraper_api_render else "false",
            "country_code": self.config.scraper_api_country,
        }
        logger.info(f"Using ScraperAPI for: {url}")
        try:
            response = await self.client.get(
                self.config.scraper_api_url,
                params=params,
                timeout=self.config.relay_timeout_seconds,
            )
        except httpx.HTTPError as e:
            logger.error(f"ScraperAPI failed for {url}: {e}")
            raise NetworkError(f"Relay request for {url} failed: {e}", url=url) from e

        if response.is_error:
            logger.error(f"ScraperAPI failed for {url}: HTTP {response.status_code}")
            raise NetworkError(
                f"Relay request for {url} failed with HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response

    async def pause(self, seconds: float) -> None:
        """Cooperative delay between successive requests to the same platform."""
        if not self.config.pacing_enabled or seconds <= 0:
            return
        await asyncio.sleep(seconds + random.random() * 0.5)
