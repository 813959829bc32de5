"""Retry policy for opening a response stream.

Only the start phase is retried: once the first chunk has been handed to the
decoder, a failure is final because replaying the request would duplicate
transcript text.
"""
from __future__ import annotations

import asyncio
import functools
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Protocol, TypeVar

from ..errors import ErrorCode, TransportError
from ..errors_parts.error_code import RETRYABLE_CODES

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: TransportError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    delay_base: float = 2.0  # exponential base (delay_base ** attempt)
    retryable_codes: frozenset[ErrorCode] = RETRYABLE_CODES
    attempt_logger: AttemptLogger | None = None

    def delays(self) -> Iterable[float]:
        for attempt in range(self.max_attempts - 1):
            yield self.delay_base**attempt


DEFAULT_RETRY_CONFIG = RetryConfig()
NO_RETRY = RetryConfig(max_attempts=1)


def _should_retry(config: RetryConfig, err: TransportError, delay: float | None) -> bool:
    return delay is not None and err.code in config.retryable_codes


def _log_attempt(config: RetryConfig, attempt: int, delay: float | None, err: TransportError | None) -> None:
    if config.attempt_logger:
        config.attempt_logger(
            attempt=attempt, max_attempts=config.max_attempts, delay=delay, error=err
        )


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Return a decorator retrying ``TransportError`` with retryable codes.

    - Exponential backoff using ``delay_base ** attempt``
    - Non-retryable codes and the final attempt re-raise immediately
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            delays = list(config.delays()) + [None]
            for attempt, delay in enumerate(delays):
                try:
                    result = func(*args, **kwargs)
                except TransportError as e:
                    _log_attempt(config, attempt, delay, e)
                    if _should_retry(config, e, delay):
                        time.sleep(delay)
                        continue
                    raise
                _log_attempt(config, attempt, None, None)
                return result
            raise RuntimeError("retry: exhausted attempts without result")  # pragma: no cover

        return wrapper

    return decorator


def async_retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Asyncio twin of :func:`retry` (backs off with ``asyncio.sleep``)."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            delays = list(config.delays()) + [None]
            for attempt, delay in enumerate(delays):
                try:
                    result = await func(*args, **kwargs)
                except TransportError as e:
                    _log_attempt(config, attempt, delay, e)
                    if _should_retry(config, e, delay):
                        await asyncio.sleep(delay)
                        continue
                    raise
                _log_attempt(config, attempt, None, None)
                return result
            raise RuntimeError("retry: exhausted attempts without result")  # pragma: no cover

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "NO_RETRY",
    "retry",
    "async_retry",
]
