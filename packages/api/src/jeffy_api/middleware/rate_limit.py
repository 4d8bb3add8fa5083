"""Per-client fixed-window rate limiting middleware."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from jeffy_shared.config import settings

from jeffy_api.responses import error_response

WINDOW_SECONDS = 60
EXEMPT_PATHS = ("/health", "/ready", "/docs", "/openapi.json")
CLEANUP_INTERVAL_SECONDS = 60


@dataclass
class RateBucket:
    count: int = 0
    window_start: float = 0.0


def _limit_for(request: Request) -> int:
    """Requests per minute: bearer/API-key callers get the customer allowance,
    admin routes the staff allowance."""
    has_credentials = request.headers.get("Authorization", "").startswith("Bearer ") or bool(
        request.headers.get("X-API-Key")
    )
    if not has_credentials:
        return settings.rate_limit_anonymous
    if request.url.path.startswith("/api/admin"):
        return settings.rate_limit_staff
    return settings.rate_limit_customer


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self._buckets: dict[str, RateBucket] = {}
        self._lock = threading.Lock()
        self._last_cleanup = time.monotonic()

    def _get_key(self, request: Request) -> str:
        auth = request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            # Token tail is enough to tell callers apart without storing tokens
            return f"jwt:{auth[-24:]}"
        api_key = request.headers.get("X-API-Key")
        if api_key:
            return f"key:{api_key}"
        client = request.client
        return f"ip:{client.host if client else 'unknown'}"

    def _cleanup_stale_buckets(self, now: float) -> None:
        """Drop buckets whose window closed more than a window ago; caller holds the lock."""
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        cutoff = now - WINDOW_SECONDS * 2
        for key in [k for k, b in self._buckets.items() if b.window_start < cutoff]:
            del self._buckets[key]
        self._last_cleanup = now

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = self._get_key(request)
        limit = _limit_for(request)
        now = time.monotonic()

        with self._lock:
            self._cleanup_stale_buckets(now)
            bucket = self._buckets.setdefault(key, RateBucket(window_start=now))
            if now - bucket.window_start >= WINDOW_SECONDS:
                bucket.count = 0
                bucket.window_start = now

            if bucket.count >= limit:
                retry_after = max(1, int(bucket.window_start + WINDOW_SECONDS - now))
                return JSONResponse(
                    status_code=429,
                    content=error_response(
                        "RATE_LIMIT_EXCEEDED",
                        f"Rate limit exceeded. Limit: {limit} requests per minute.",
                    ),
                    headers={
                        "Retry-After": str(retry_after),
                        "X-RateLimit-Limit": str(limit),
                        "X-RateLimit-Remaining": "0",
                    },
                )

            bucket.count += 1
            remaining = limit - bucket.count

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
