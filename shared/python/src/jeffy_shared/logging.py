"""
logging.py — structlog configuration for the API and the ops CLI.

Sets up structured logging with JSON or human-readable console output
controlled by settings.log_format. Call configure_logging() once at
process startup (the app factory and the CLI both do).

Usage:
    from jeffy_shared.logging import configure_logging, get_logger

    configure_logging()
    log = get_logger("jeffy_api.services.order_service")
    log.info("order_created", order_id=order_id, total=total)

    # Bind context for all subsequent log calls:
    log = log.bind(user_id=user.user_id)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from jeffy_shared.config import settings


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog for the current process. Idempotent.

    Args:
        log_level:  Override settings.log_level ("DEBUG", "INFO", ...).
        log_format: Override settings.log_format ("json" | "console").
    """
    level = (log_level or settings.log_level).upper()
    fmt = log_format or settings.log_format
    numeric_level = getattr(logging, level, logging.INFO)

    # Uvicorn and httpx log through the stdlib
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if fmt == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """
    Return a bound structlog logger with optional initial context values.

    Args:
        name:             Logger name (conventionally the module __name__).
        **initial_values: Key-value pairs merged into every log record.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger  # type: ignore[return-value]
