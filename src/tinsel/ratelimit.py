"""Per-client rate limiting for party creation.

Sliding one-minute window keyed by client address. Zero disables it.
"""

from __future__ import annotations

import threading
import time
from collections import deque

from fastapi import Request

from tinsel.errors import RateLimitedError

WINDOW_SECONDS = 60.0


class RateLimiter:
    """FastAPI dependency allowing ``limit_per_minute`` calls per client."""

    def __init__(self, limit_per_minute: int, clock=time.monotonic) -> None:
        self.limit_per_minute = limit_per_minute
        self._clock = clock
        self.hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _sweep(self, now: float) -> None:
        stale = [client for client, window in self.hits.items() if now - window[-1] >= WINDOW_SECONDS]
        for client in stale:
            del self.hits[client]

    def __call__(self, request: Request) -> None:
        if self.limit_per_minute <= 0:
            return
        client = request.client.host if request.client else "unknown"
        now = self._clock()
        with self._lock:
            self._sweep(now)
            window = self.hits.setdefault(client, deque())
            while window and now - window[0] >= WINDOW_SECONDS:
                window.popleft()
            if len(window) >= self.limit_per_minute:
                raise RateLimitedError("Too many requests, try again later")
            window.append(now)


def make_rate_limiter(limit_per_minute: int, clock=time.monotonic) -> RateLimiter:
    return RateLimiter(limit_per_minute, clock)
