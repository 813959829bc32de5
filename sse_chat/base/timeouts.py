"""Timeout configuration for the HTTP transport.

The stream decoder itself defines no timeouts; the transport collaborator owns
them. Values are read once from the environment and cached:

    SSE_CHAT_CONNECT_TIMEOUT_SECONDS   (default 10)
    SSE_CHAT_READ_TIMEOUT_SECONDS      (default 60, idle time between chunks)
    SSE_CHAT_WRITE_TIMEOUT_SECONDS     (default 30)

Non-positive or unparsable values fall back to the default.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Time allowed to establish the connection.
        read_timeout_seconds: Idle time allowed between two chunks of the
            streamed response body.
        write_timeout_seconds: Time allowed to send the request body.
    """

    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 60.0
    write_timeout_seconds: float = 30.0

    def to_httpx(self) -> httpx.Timeout:
        """Return the equivalent ``httpx.Timeout``."""
        return httpx.Timeout(
            connect=self.connect_timeout_seconds,
            read=self.read_timeout_seconds,
            write=self.write_timeout_seconds,
            pool=self.connect_timeout_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None
_ENV_NAMES = (
    "SSE_CHAT_CONNECT_TIMEOUT_SECONDS",
    "SSE_CHAT_READ_TIMEOUT_SECONDS",
    "SSE_CHAT_WRITE_TIMEOUT_SECONDS",
)


def _parse_env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`.

    The cache is refreshed when any of the timeout variables change, so tests
    can adjust them with ``monkeypatch.setenv``.
    """
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        read_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.read_timeout_seconds),
        write_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.write_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
