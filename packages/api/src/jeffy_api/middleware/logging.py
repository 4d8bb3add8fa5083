"""Structured request/response logging middleware."""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = structlog.get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and tags every log record with a request id."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.monotonic()
        log = logger.bind(
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            log.error(
                "request_failed",
                error=str(exc),
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
            raise

        elapsed_ms = round((time.monotonic() - start) * 1000, 2)
        event = "request_completed" if response.status_code < 500 else "request_errored"
        log.info(event, status=response.status_code, duration_ms=elapsed_ms)
        response.headers["X-Request-ID"] = request_id
        return response
