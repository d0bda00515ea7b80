"""Async sliding-window rate limiter for provider API calls."""

import asyncio
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window rate limiter shared by every call to one provider.

    Usage::

        limiter = RateLimiter(requests_per_minute=30, name="search_console")

        async with limiter:
            await make_request()
    """

    def __init__(self, requests_per_minute: int = 60, name: str = "default"):
        self._rpm = requests_per_minute
        self._name = name
        self._window: list[float] = []
        self._lock: Optional[asyncio.Lock] = None

    def _clean_window(self, now: float) -> None:
        """Remove timestamps older than one minute."""
        self._window = [t for t in self._window if now - t < 60.0]

    def _wait_time(self) -> float:
        """Calculate how long to wait before the next request is allowed."""
        now = time.monotonic()
        self._clean_window(now)
        if len(self._window) >= self._rpm:
            return 60.0 - (now - self._window[0])
        return 0.0

    def _record(self) -> None:
        self._window.append(time.monotonic())

    async def acquire(self) -> None:
        """Wait until a request slot is available."""
        # Created lazily so the lock binds to the loop that first uses it.
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            while True:
                wait = self._wait_time()
                if wait <= 0:
                    break
                logger.debug("RateLimiter(%s) sleeping %.2fs", self._name, wait)
                await asyncio.sleep(wait)
            self._record()

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, *args):
        pass

    @property
    def requests_in_last_minute(self) -> int:
        """Number of requests made in the last 60 seconds."""
        self._clean_window(time.monotonic())
        return len(self._window)
