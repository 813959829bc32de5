"""Dev server wire format and end-to-end client round trips."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sse_chat.base.errors import ErrorCode, TransportError
from sse_chat.base.http import HttpStreamTransport
from sse_chat.base.resilience import NO_RETRY
from sse_chat.client import ChatClient
from sse_chat.config.defaults import CHAT_FUNCTION_PATH
from sse_chat.service.app import app, iter_echo_events, split_fragments


@pytest.fixture()
def app_client():
    with TestClient(app) as client:
        yield client


def _transport(app_client: TestClient) -> HttpStreamTransport:
    url = f"http://testserver{CHAT_FUNCTION_PATH}"
    return HttpStreamTransport(url, client=app_client, retry_config=NO_RETRY)


def _chat_client(app_client: TestClient) -> ChatClient:
    return ChatClient(_transport(app_client))


def test_health(app_client):
    resp = app_client.get("/health")
    assert resp.status_code == 200  # nosec B101
    assert resp.json() == {"ok": True}  # nosec B101


def test_chat_endpoint_streams_sse(app_client):
    resp = app_client.post(CHAT_FUNCTION_PATH, json={"messages": [{"role": "user", "content": "ping"}]})
    assert resp.status_code == 200  # nosec B101
    assert resp.headers["content-type"].startswith("text/event-stream")  # nosec B101
    lines = resp.text.splitlines()
    assert lines[0] == ": keep-alive"  # nosec B101
    assert lines[-2] == "data: [DONE]"  # nosec B101


def test_invalid_body_is_rejected(app_client):
    resp = app_client.post(CHAT_FUNCTION_PATH, json={"messages": []})
    assert resp.status_code == 422  # nosec B101


def test_split_fragments_concatenate_back():
    text = "  You said:   hello\nworld  "
    parts = split_fragments(text)
    assert "".join(parts) == text  # nosec B101
    assert len(parts) == 4  # nosec B101
    assert split_fragments("") == []  # nosec B101


def test_long_reply_interleaves_keepalives():
    events = list(iter_echo_events(" ".join(["w"] * 20)))
    assert events.count(": keep-alive\n\n") == 3  # nosec B101
    assert events[-1] == "data: [DONE]\n\n"  # nosec B101


def test_client_round_trip_against_dev_server(app_client):
    client = _chat_client(app_client)
    seen = []
    reply = client.send("hello there world", seen.append)
    assert reply == "You said: hello there world"  # nosec B101
    assert seen[-1] == reply  # nosec B101
    assert len(seen) > 2  # nosec B101
    assert client.send("again") == "You said: again"  # nosec B101


def test_transport_surfaces_validation_errors(app_client):
    with pytest.raises(TransportError) as info:
        _transport(app_client).open({"messages": []})
    assert info.value.code is ErrorCode.VALIDATION  # nosec B101
    assert info.value.status_code == 422  # nosec B101


def test_dev_server_main_reads_host_and_port(monkeypatch):
    from sse_chat.service import dev_server

    calls = []
    monkeypatch.setattr(dev_server.uvicorn, "run", lambda app_path, **kw: calls.append((app_path, kw)))
    monkeypatch.setenv("SSE_CHAT_DEV_HOST", "0.0.0.0")  # nosec B104 - test value
    monkeypatch.setenv("SSE_CHAT_DEV_PORT", "not-a-port")
    dev_server.main()
    app_path, kwargs = calls[0]
    assert app_path == "sse_chat.service.app:app"  # nosec B101
    assert kwargs["host"] == "0.0.0.0"  # nosec B101 B104
    assert kwargs["port"] == 8787  # nosec B101
