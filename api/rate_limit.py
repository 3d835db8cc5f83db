"""
In-process fixed-window rate limiting for the auth endpoints.

Counters live in this process only; they are reset on restart and are not
shared between workers.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Tuple

from fastapi import Request

from config.settings import Settings
from utils.errors import ApiError, ErrorKind, Result

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many login attempts, please try again later"


class FixedWindowLimiter:
    def __init__(self, settings: Settings, clock: Callable[[], float] = time.monotonic) -> None:
        self.limit = settings.auth_rate_limit
        self.window = settings.auth_rate_window_seconds
        self._clock = clock
        # client key -> (window start, hits in window)
        self._hits: Dict[str, Tuple[float, int]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._hits)

    def hit(self, key: str) -> Result[int]:
        """Count one request for ``key``; the value is the number of requests left."""
        if self.limit <= 0:
            return Result.success(-1)

        now = self._clock()
        if now - self._last_sweep >= self.window:
            self._sweep(now)
        start, count = self._hits.get(key, (now, 0))
        if now - start >= self.window:
            start, count = now, 0
        count += 1
        self._hits[key] = (start, count)

        if count > self.limit:
            logger.warning("Rate limit exceeded for %s (%d requests)", key, count)
            return Result.failure(ErrorKind.RATE_LIMITED, RATE_LIMIT_MESSAGE)
        return Result.success(self.limit - count)

    def _sweep(self, now: float) -> None:
        """Forget clients whose window has run out."""
        stale = [key for key, (start, _) in self._hits.items() if now - start >= self.window]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now
        if stale:
            logger.debug("Dropped %d expired rate-limit entries", len(stale))


async def auth_rate_limit(request: Request) -> None:
    limiter: FixedWindowLimiter = request.app.state.auth_limiter
    key = request.client.host if request.client else "unknown"
    outcome = limiter.hit(key)
    if not outcome.ok:
        raise ApiError(outcome.error)
