# mail_scout/crawler/rate_limiter.py
"""
Process-wide request throttle: a hard ceiling of ``max_requests`` starts per
rolling ``time_window`` plus a random pause after every accepted request.
"""
from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

from mail_scout.config import RateLimitConfig

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class RateLimiter:
    """Sliding-window limiter with per-request jitter.

    Only :meth:`wait_for_slot` is public. The timestamp window is guarded by
    an :class:`asyncio.Lock`, so concurrent callers always prune and append
    against a consistent view.
    """

    def __init__(
        self,
        max_requests: int = 8,
        time_window: float = 60.0,
        min_delay: float = 3.0,
        max_delay: float = 7.0,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if time_window <= 0:
            raise ValueError("time_window must be > 0")
        if not 0 <= min_delay <= max_delay:
            raise ValueError("expected 0 <= min_delay <= max_delay")
        self.max_requests = max_requests
        self.time_window = time_window
        self.min_delay = min_delay
        self.max_delay = max_delay
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._requests: Deque[float] = deque()
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger("MailScout")

    @classmethod
    def from_config(cls, config: RateLimitConfig, **kwargs) -> RateLimiter:
        return cls(
            max_requests=config.max_requests,
            time_window=config.time_window,
            min_delay=config.jitter.min_seconds,
            max_delay=config.jitter.max_seconds,
            **kwargs,
        )

    async def wait_for_slot(self) -> None:
        """Suspend the caller until a request may start."""
        async with self._lock:
            now = self._clock()
            self._prune(now)
            while len(self._requests) >= self.max_requests:
                wait = self.time_window - (now - self._requests[0])
                if wait > 0:
                    self.logger.info("Rate limit reached. Waiting %d seconds...", math.ceil(wait))
                    await self._sleep(wait)
                    now = self._clock()
                # the oldest start has left the window once its wait is over
                self._requests.popleft()
                self._prune(now)
            self._requests.append(now)

            delay = self._rng.uniform(self.min_delay, self.max_delay)
            if delay > 0:
                await self._sleep(delay)

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.time_window:
            self._requests.popleft()


__all__ = ["RateLimiter"]
