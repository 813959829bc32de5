"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements httpx exception mapping and HTTP status extraction, so transport
failures surface to callers as a single :class:`TransportError` type.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode, RETRYABLE_CODES
from .transport_error import TransportError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    val = getattr(exc, "status_code", None)
    if isinstance(val, int) and 100 <= val < 600:
        return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def code_for_status(status: int) -> ErrorCode:
    """Map an HTTP status onto an :class:`ErrorCode` (5xx default to server error)."""
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. TransportError passthrough.
        2. Timeout exceptions (httpx, sync/async builtins).
        3. httpx network errors.
        4. HTTP status mapping.
        5. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, TransportError):
        return exc.code
    if isinstance(exc, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError)):
        return ErrorCode.CONNECTION
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc)
    if status is not None:
        return code_for_status(status)
    if isinstance(exc, (ConnectionError, OSError)):
        return ErrorCode.CONNECTION
    return ErrorCode.UNKNOWN


def to_transport_error(exc: BaseException, endpoint: Optional[str] = None) -> TransportError:
    """Wrap ``exc`` as a :class:`TransportError` (returned unchanged if it already is one)."""
    if isinstance(exc, TransportError):
        return exc
    code = classify_exception(exc)
    return TransportError(
        code=code,
        message=str(exc)[:260] or exc.__class__.__name__,
        endpoint=endpoint,
        status_code=_extract_status(exc),
        retryable=code in RETRYABLE_CODES,
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "code_for_status",
    "to_transport_error",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
