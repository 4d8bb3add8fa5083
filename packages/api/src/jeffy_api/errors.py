"""Domain errors raised by services and rendered by the app's exception handlers."""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base class for business-rule failures surfaced to API clients."""

    code = "SERVICE_ERROR"
    status_code = 400

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationFailed(ServiceError):
    code = "VALIDATION_FAILED"
    status_code = 400


class NotFound(ServiceError):
    code = "NOT_FOUND"
    status_code = 404


class Conflict(ServiceError):
    code = "CONFLICT"
    status_code = 409


class InsufficientStock(ServiceError):
    code = "INSUFFICIENT_STOCK"
    status_code = 400


class UpstreamUnavailable(ServiceError):
    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503


class Forbidden(ServiceError):
    code = "FORBIDDEN"
    status_code = 403
