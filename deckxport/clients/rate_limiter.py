"""
Fixed-interval request spacing.

Each upstream client owns one limiter. Calls to ``wait()`` are serialized, and
each returns no sooner than ``min_interval`` seconds after the previous one
returned. No jitter, no backoff.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable


class RateLimiter:
    """Enforces a minimum delay between successive requests."""

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_release: float | None = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Suspend until the minimum interval since the previous call has passed."""
        async with self._lock:
            if self._last_release is not None:
                remaining = self._last_release + self.min_interval - self._clock()
                if remaining > 0:
                    await self._sleep(remaining)
            self._last_release = self._clock()
