"""Reservoir rate limiting for Riot API calls.

Every request passes through two limiters: the application limiter (the
key's overall quota) and, nested inside it, the per-call limiter.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class ReservoirLimiter:
    """Token reservoir refilled to full every window, with a concurrency cap."""

    def __init__(
        self,
        name: str,
        reservoir: int,
        refresh_interval: float,
        max_concurrent: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize limiter.

        Args:
            name: Limiter name used in log events
            reservoir: Requests allowed per refresh window
            refresh_interval: Window length in seconds
            max_concurrent: Requests allowed in flight at the same time
            clock: Monotonic clock, injectable for tests
        """
        if reservoir < 1 or max_concurrent < 1:
            raise ValueError("reservoir and max_concurrent must be positive")

        self.name = name
        self.reservoir = reservoir
        self.refresh_interval = refresh_interval
        self.max_concurrent = max_concurrent
        self._clock = clock

        self._remaining = reservoir
        self._refreshed_at = clock()
        self._lock = asyncio.Lock()
        self._slots = asyncio.Semaphore(max_concurrent)

        self.acquired_total = 0
        self.throttled_total = 0

    @property
    def remaining(self) -> int:
        """Tokens left in the current window."""
        self._refill(self._clock())
        return self._remaining

    def _refill(self, now: float) -> None:
        if now - self._refreshed_at >= self.refresh_interval:
            self._remaining = self.reservoir
            self._refreshed_at = now

    async def _take_token(self) -> None:
        # Waiters queue on the lock, so tokens are handed out in arrival order
        async with self._lock:
            while True:
                now = self._clock()
                self._refill(now)
                if self._remaining > 0:
                    self._remaining -= 1
                    self.acquired_total += 1
                    return

                wait_time = max(self.refresh_interval - (now - self._refreshed_at), 0)
                self.throttled_total += 1
                logger.debug(
                    "Rate limit reservoir empty, waiting",
                    limiter=self.name,
                    wait_time=round(wait_time, 3),
                )
                await asyncio.sleep(wait_time)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[None]:
        """Hold one concurrency slot and one reservoir token for the block."""
        async with self._slots:
            await self._take_token()
            yield


class RiotRateLimiter:
    """Application limiter wrapping the per-call limiter."""

    def __init__(
        self,
        app_limiter: ReservoirLimiter,
        method_limiter: Optional[ReservoirLimiter] = None,
    ):
        self.app = app_limiter
        self.method = method_limiter or ReservoirLimiter(
            "method", reservoir=10, refresh_interval=1.0, max_concurrent=5
        )

    @classmethod
    def from_settings(cls, settings) -> "RiotRateLimiter":
        """Build both limiters from worker settings."""
        window = settings.riot_rate_limit_window_seconds
        return cls(
            ReservoirLimiter(
                "app",
                reservoir=settings.riot_app_rate_limit,
                refresh_interval=window,
                max_concurrent=settings.riot_app_max_concurrent,
            ),
            ReservoirLimiter(
                "method",
                reservoir=settings.riot_method_rate_limit,
                refresh_interval=window,
                max_concurrent=settings.riot_method_max_concurrent,
            ),
        )

    @asynccontextmanager
    async def limit(self) -> AsyncIterator[None]:
        """Acquire the application limiter, then the per-call limiter."""
        async with self.app.acquire():
            async with self.method.acquire():
                yield

    def get_stats(self) -> dict:
        return {
            "app_acquired": self.app.acquired_total,
            "app_throttled": self.app.throttled_total,
            "method_acquired": self.method.acquired_total,
            "method_throttled": self.method.throttled_total,
        }
