"""Ahrefs domain-authority provider."""

import logging
from datetime import date
from typing import Optional

import aiohttp

from seo_digest.integrations.base import BaseProvider, FailurePolicy, provider_operation
from seo_digest.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

AHREFS_API_URL = "https://api.ahrefs.com/v3/site-explorer/domain-rating"


class AhrefsProvider(BaseProvider):
    """Client for the Ahrefs v3 Site Explorer domain-rating endpoint.

    Usage::

        ahrefs = AhrefsProvider(api_token="...")
        dr = await ahrefs.rating("example.com")
        await ahrefs.close()
    """

    provider_name = "Ahrefs"

    def __init__(
        self,
        api_token: str,
        timeout: float = 30.0,
        limiter: Optional[RateLimiter] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._api_token = api_token
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._limiter = limiter or RateLimiter(requests_per_minute=60, name="ahrefs")
        self._http_session = session

    async def _get_http_session(self) -> aiohttp.ClientSession:
        """Lazily create and return an aiohttp session."""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={
                    "Authorization": f"Bearer {self._api_token}",
                    "Accept": "application/json",
                },
            )
        return self._http_session

    @provider_operation(FailurePolicy.FATAL)
    async def rating(self, domain: str, on_date: Optional[date] = None) -> float:
        """Domain Rating (0-100) of *domain* as of *on_date* (default today)."""
        on_date = on_date or date.today()
        session = await self._get_http_session()
        async with self._limiter:
            async with session.get(
                AHREFS_API_URL,
                params={"target": domain, "date": on_date.isoformat()},
            ) as resp:
                resp.raise_for_status()
                payload = await resp.json()
        value = payload["domain_rating"]["domain_rating"]
        logger.info("Ahrefs DR for %s: %s", domain, value)
        return float(value)

    async def close(self) -> None:
        """Clean up resources."""
        if self._http_session and not self._http_session.closed:
            await self._http_session.close()
