"""Lifecycle log events emitted by the stream controllers."""
from __future__ import annotations

import json

import httpx
import pytest

from sse_chat.base.errors import TransportError
from sse_chat.base.logging import REQUIRED_NORMALIZED_KEYS, LogContext
from sse_chat.base.streaming import StreamController


def _line(text: str) -> str:
    return "data: " + json.dumps({"choices": [{"delta": {"content": text}}]}) + "\n"


def _events(records, name):
    return [r for r in records if r.get("event") == name]


def test_completed_stream_logs_start_and_end(log_records):
    ctx = LogContext(endpoint="http://chat.test/functions/v1/chat", request_id="req-1")
    ctrl = StreamController.over(
        [": keep-alive\n", _line("Hi"), "data: {bad\n", "data: [DONE]\n"],
        ctx=ctx,
    )
    ctrl.run()

    start = _events(log_records, "stream.start")
    end = _events(log_records, "stream.end")
    assert len(start) == 1 and len(end) == 1  # nosec B101
    for rec in start + end:
        for key in REQUIRED_NORMALIZED_KEYS:
            if key not in rec:
                raise AssertionError(f"missing {key} in {rec}")
    done = end[0]
    assert done["state"] == "completed"  # nosec B101
    assert done["emitted"] == 1  # nosec B101
    assert done["saw_sentinel"] is True  # nosec B101
    assert done["request_id"] == "req-1"  # nosec B101
    assert done["session_id"] == ctrl.session.session_id  # nosec B101
    assert done["malformed_retries"] == 1  # nosec B101
    assert done["malformed_dropped"] == 1  # nosec B101
    assert "error_code" not in done  # nosec B101
    assert _events(log_records, "stream.decode_retry")  # nosec B101


def test_failed_stream_logs_error_with_code(log_records):
    def starter():
        raise httpx.ConnectError("refused")

    with pytest.raises(TransportError):
        StreamController(starter).run()
    errors = _events(log_records, "stream.error")
    assert len(errors) == 1  # nosec B101
    assert errors[0]["_level"] == "ERROR"  # nosec B101
    assert errors[0]["error_code"] == "connection"  # nosec B101
    assert errors[0]["state"] == "failed"  # nosec B101


def test_cancelled_stream_logs_reason(log_records):
    ctrl = StreamController.over([_line("a")])
    ctrl.cancel("user stop")
    ctrl.run()
    cancelled = _events(log_records, "stream.cancelled")
    assert cancelled and cancelled[0]["reason"] == "user stop"  # nosec B101
