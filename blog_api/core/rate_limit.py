"""Per-client request limiting consulted as a pass/reject decision per request."""

import logging
import math
import time
from collections.abc import Callable
from typing import Protocol

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from blog_api.core.errors import RateLimitExceededError, error_body

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "You have sent too many requests in a given amount of time. Please try again later."
)


class RateLimiter(Protocol):
    limit: int
    window_sec: float

    def allow(self, key: str) -> bool: ...

    def retry_after(self, key: str) -> float:
        """Seconds until `key` may be admitted again."""
        ...


class FixedWindowRateLimiter:
    """
    Admit at most `limit` calls per key in each `window_sec` window.

    Expired windows are swept at most once per window, so keys for clients
    that stop calling do not accumulate.
    """

    def __init__(
        self,
        limit: int,
        window_sec: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_sec = window_sec
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_sweep = clock()

    def allow(self, key: str) -> bool:
        now = self._clock()
        if now - self._last_sweep >= self.window_sec:
            self._sweep(now)
        started, count = self._windows.get(key, (now, 0))
        if now - started >= self.window_sec:
            started, count = now, 0
        if count >= self.limit:
            self._windows[key] = (started, count)
            return False
        self._windows[key] = (started, count + 1)
        return True

    def retry_after(self, key: str) -> float:
        window = self._windows.get(key)
        if window is None:
            return 0.0
        return max(0.0, window[0] + self.window_sec - self._clock())

    def _sweep(self, now: float) -> None:
        self._windows = {
            key: window
            for key, window in self._windows.items()
            if now - window[0] < self.window_sec
        }
        self._last_sweep = now


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject with 429 when the limiter refuses the client's IP."""

    def __init__(self, app: ASGIApp, limiter: RateLimiter) -> None:
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_id = f"ip:{request.client.host}" if request.client else "ip:unknown"
        if not self.limiter.allow(client_id):
            retry_after = max(1, math.ceil(self.limiter.retry_after(client_id)))
            logger.warning("Rate limit exceeded for %s", client_id)
            err = RateLimitExceededError(RATE_LIMIT_MESSAGE)
            return JSONResponse(
                status_code=err.status_code,
                content=error_body(err, expose_detail=False),
                headers={
                    "Retry-After": str(retry_after),
                    "RateLimit-Policy": (
                        f'"default";q={self.limiter.limit};w={math.ceil(self.limiter.window_sec)}'
                    ),
                    "RateLimit": f'"default";r=0;t={retry_after}',
                },
            )
        return await call_next(request)
