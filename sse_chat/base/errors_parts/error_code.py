"""
Normalized transport error codes (taxonomy).

Values are lowercase snake_case and are a stable contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing transport failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    CONNECTION = "connection"
    UNKNOWN = "unknown"


# Codes for which re-opening the stream is worth attempting
RETRYABLE_CODES = frozenset(
    {ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE}
)


__all__ = ["ErrorCode", "RETRYABLE_CODES"]
