"""Mapping of transport exceptions onto ErrorCode values."""
from __future__ import annotations

import httpx
import pytest

from sse_chat.base.errors import (
    ErrorCode,
    TransportError,
    classify_exception,
    code_for_status,
    to_transport_error,
)


class _WithStatus(Exception):
    def __init__(self, status_code):
        super().__init__(f"status {status_code}")
        self.status_code = status_code


@pytest.mark.parametrize(
    "exc,code",
    [
        (httpx.ReadTimeout("slow"), ErrorCode.TIMEOUT),
        (TimeoutError(), ErrorCode.TIMEOUT),
        (httpx.ConnectError("refused"), ErrorCode.CONNECTION),
        (httpx.RemoteProtocolError("peer closed"), ErrorCode.CONNECTION),
        (httpx.ReadError("reset"), ErrorCode.TRANSIENT),
        (_WithStatus(429), ErrorCode.RATE_LIMIT),
        (_WithStatus(503), ErrorCode.UNAVAILABLE),
        (ConnectionResetError(), ErrorCode.CONNECTION),
        (ValueError("boom"), ErrorCode.UNKNOWN),
    ],
)
def test_classify_exception(exc, code):
    assert classify_exception(exc) is code  # nosec B101


def test_status_mapping_defaults():
    assert code_for_status(401) is ErrorCode.AUTH  # nosec B101
    assert code_for_status(599) is ErrorCode.SERVER_ERROR  # nosec B101
    assert code_for_status(418) is ErrorCode.UNKNOWN  # nosec B101


def test_to_transport_error_wraps_and_passes_through():
    original = httpx.ReadTimeout("slow")
    err = to_transport_error(original, "http://x")
    assert err.code is ErrorCode.TIMEOUT  # nosec B101
    assert err.retryable  # nosec B101
    assert err.raw is original  # nosec B101
    assert err.endpoint == "http://x"  # nosec B101
    assert to_transport_error(err) is err  # nosec B101


def test_transport_error_str_includes_status():
    err = TransportError(code=ErrorCode.AUTH, message="bad key", status_code=401)
    assert str(err) == "auth [401]: bad key"  # nosec B101
    assert str(TransportError(code=ErrorCode.CONNECTION, message="reset")) == "connection: reset"  # nosec B101
