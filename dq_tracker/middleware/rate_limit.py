"""Sliding-window rate limiting per client IP.

Admission control in front of every /api/* route, applied before (and
independently of) authentication. Each client IP may make `max_requests`
requests in any trailing `window_seconds` interval; further requests get a
429 until older ones age out of the window.

State is an in-memory table of request timestamps per IP, so limits are per
process. IPs whose requests have all aged out are dropped from the table, at
most once per window, so it only holds clients seen in the last window.
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

_LIMITED_PREFIX = "/api/"


class SlidingWindowLimiter:
    """Tracks request timestamps per key over a trailing window."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        """Number of keys currently holding timestamps."""
        return len(self._hits)

    def _evict(self, hits: Deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self._hits):
            hits = self._hits[key]
            self._evict(hits, now)
            if not hits:
                del self._hits[key]

    def hit(self, key: str) -> bool:
        """Record a request for `key`. Returns False when it must be rejected."""
        now = self._clock()
        self._sweep(now)
        hits = self._hits.setdefault(key, deque())
        self._evict(hits, now)
        if len(hits) >= self.max_requests:
            return False
        hits.append(now)
        return True

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest request in the window expires."""
        hits = self._hits.get(key)
        if not hits:
            return 0
        remaining = hits[0] + self.window_seconds - self._clock()
        return max(1, math.ceil(remaining))

    def remaining(self, key: str) -> int:
        hits = self._hits.get(key)
        return self.max_requests - len(hits or ())


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP sliding-window limiter for /api/* paths.

    Args:
        max_requests: Requests allowed per client IP per window.
        window_seconds: Window length in seconds.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: float = 900,
        limiter: Optional[SlidingWindowLimiter] = None,
    ) -> None:
        super().__init__(app)
        self.limiter = limiter or SlidingWindowLimiter(max_requests, window_seconds)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith(_LIMITED_PREFIX):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        if not self.limiter.hit(client_ip):
            logger.warning("Rate limit exceeded for %s on %s", client_ip, path)
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": RATE_LIMIT_MESSAGE},
                headers={"Retry-After": str(self.limiter.retry_after(client_ip))},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(self.limiter.remaining(client_ip))
        return response
