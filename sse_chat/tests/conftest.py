"""Pytest configuration for the sse_chat test suite.

Keeps configuration hermetic (no stray ``.env`` or config file is read) and
provides a capture fixture for the structured ``sse_chat`` logger, which does
not propagate to the root logger.
"""

from __future__ import annotations

import json
import logging
from typing import Iterator, List

import pytest

from sse_chat.base.http import close_all_clients
from sse_chat.config import reset_config_cache


@pytest.fixture(autouse=True)
def hermetic_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Point dotenv/config lookups at empty locations for every test."""
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "absent.env"))
    for name in (
        "SSE_CHAT_CONFIG_FILE",
        "SSE_CHAT_ENDPOINT",
        "SSE_CHAT_API_KEY",
        "SSE_CHAT_MALFORMED_RETRY_LIMIT",
        "SSE_CHAT_START_ATTEMPTS",
        "SSE_CHAT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture(scope="session", autouse=True)
def close_http_clients_after_session() -> Iterator[None]:
    yield
    close_all_clients()


@pytest.fixture()
def log_records(monkeypatch: pytest.MonkeyPatch) -> Iterator[List[dict]]:
    """Collect structured events emitted on the ``sse_chat`` logger tree.

    Each entry is the decoded JSON payload plus a ``_level`` key.
    """
    monkeypatch.setenv("SSE_CHAT_LOG_LEVEL", "DEBUG")
    records: List[dict] = []

    class _Collector(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                payload = json.loads(record.getMessage())
            except ValueError:
                payload = {"msg": record.getMessage()}
            payload["_level"] = record.levelname
            records.append(payload)

    handler = _Collector()
    # Initialize the base logger first; its one-time setup replaces handlers.
    from sse_chat.base.logging import get_logger

    base = get_logger()
    base.addHandler(handler)
    try:
        yield records
    finally:
        base.removeHandler(handler)

