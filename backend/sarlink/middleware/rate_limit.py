"""Simple in-memory rate limiter for planning submissions."""

from __future__ import annotations

import time
from collections import defaultdict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

# Max plan submissions per window per IP
MAX_REQUESTS = 20
WINDOW_SECONDS = 60

LIMITED_PATHS = ("/api/plans",)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limiter keyed by client IP.

    Only POSTs to the planning endpoint count, since each one costs an
    external model call. Reads, plan execution and the websocket are free.
    """

    def __init__(self, app, max_requests: int = MAX_REQUESTS, window: int = WINDOW_SECONDS):  # type: ignore[no-untyped-def]
        super().__init__(app)
        self.max_requests = max_requests
        self.window = window
        self._buckets: dict[str, list[float]] = defaultdict(list)

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        if request.method != "POST" or request.url.path not in LIMITED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()

        # Prune old entries
        cutoff = now - self.window
        self._buckets[client_ip] = bucket = [t for t in self._buckets[client_ip] if t > cutoff]

        if len(bucket) >= self.max_requests:
            return JSONResponse(
                {"error": "Planning rate limit exceeded. Try again later."},
                status_code=429,
                headers={"Retry-After": str(self.window)},
            )

        bucket.append(now)
        return await call_next(request)
