"""
retry.py — Exponential-backoff retry decorators for outbound calls.

Uses tenacity under the hood and logs every retry with structlog, so a
flaky Google Maps call or a dropped Supabase connection is visible in
the logs before it surfaces as an error.

Usage:
    from jeffy_shared.retry import with_retry

    @with_retry(max_attempts=3, base_delay=0.5, retry_on=httpx.TransportError)
    async def geocode(address: str) -> dict: ...
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Coroutine[Any, Any, Any]])
G = TypeVar("G", bound=Callable[..., Any])


def _log_before_sleep(name: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def _before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        log.warning(
            "retry_attempt",
            function=name,
            attempt=state.attempt_number,
            max_attempts=max_attempts,
            delay_s=round(state.next_action.sleep, 2) if state.next_action else None,
            error=str(exc) if exc else None,
        )

    return _before_sleep


def with_retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retry_on: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> Callable[[F], F]:
    """
    Retry an async function with exponential backoff.

    Delays: base_delay * 2^(attempt-1), capped at max_delay. The last
    exception is re-raised once attempts are exhausted.

    Args:
        max_attempts: Total attempts before raising.
        base_delay:   Initial delay in seconds.
        max_delay:    Maximum delay cap in seconds.
        retry_on:     Exception type(s) that trigger a retry.
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                async for attempt in AsyncRetrying(
                    stop=stop_after_attempt(max_attempts),
                    wait=wait_exponential(multiplier=base_delay, max=max_delay),
                    retry=retry_if_exception_type(retry_on),
                    before_sleep=_log_before_sleep(fn.__qualname__, max_attempts),
                    reraise=True,
                ):
                    with attempt:
                        return await fn(*args, **kwargs)
            except Exception as exc:
                log.error("call_failed", function=fn.__qualname__, error=str(exc))
                raise

        return wrapper  # type: ignore[return-value]

    return decorator


def with_retry_sync(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retry_on: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> Callable[[G], G]:
    """Same as with_retry but for synchronous functions (ops jobs)."""

    def decorator(fn: G) -> G:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                for attempt in Retrying(
                    stop=stop_after_attempt(max_attempts),
                    wait=wait_exponential(multiplier=base_delay, max=max_delay),
                    retry=retry_if_exception_type(retry_on),
                    before_sleep=_log_before_sleep(fn.__qualname__, max_attempts),
                    reraise=True,
                ):
                    with attempt:
                        return fn(*args, **kwargs)
            except Exception as exc:
                log.error("call_failed", function=fn.__qualname__, error=str(exc))
                raise

        return wrapper  # type: ignore[return-value]

    return decorator
