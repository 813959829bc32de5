"""Resilience helpers (start-phase retry)."""

from .retry import DEFAULT_RETRY_CONFIG, NO_RETRY, RetryConfig, async_retry, retry

__all__ = ["DEFAULT_RETRY_CONFIG", "NO_RETRY", "RetryConfig", "async_retry", "retry"]
