"""Unified configuration layer for the chat client.

Sources are merged in a predictable order (later wins):
    1. Built-in defaults (``config.defaults``)
    2. Optional config file (JSON or YAML) pointed to by ``SSE_CHAT_CONFIG_FILE``
    3. Environment variables
    4. In-code overrides passed to :func:`get_stream_config`

Environment Variables
---------------------
SSE_CHAT_ENDPOINT, SSE_CHAT_API_KEY, SSE_CHAT_MALFORMED_RETRY_LIMIT,
SSE_CHAT_START_ATTEMPTS. Timeouts are read by
:func:`sse_chat.base.timeouts.get_timeout_config`. A ``.env`` file (path in
``DOTENV_FILE``, default ``.env``) is loaded once and never overrides
variables already present in the environment.

Config File
-----------
```
endpoint: https://example.supabase.co/functions/v1/chat
api_key: ${SSE_CHAT_API_KEY}
malformed_retry_limit: 2
```
Values of the form ``${NAME}`` are expanded from the environment.

Public API
----------
* get_stream_config(overrides: dict | None = None) -> StreamSettings
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..base.timeouts import TimeoutConfig, get_timeout_config
from .defaults import DEFAULTS

ENV_FIELD_MAP = {
    "endpoint": "SSE_CHAT_ENDPOINT",
    "api_key": "SSE_CHAT_API_KEY",  # pragma: allowlist secret - env var name, not a secret
    "malformed_retry_limit": "SSE_CHAT_MALFORMED_RETRY_LIMIT",
    "start_attempts": "SSE_CHAT_START_ATTEMPTS",
}
_INT_FIELDS = ("malformed_retry_limit", "start_attempts")

_FILE_CACHE: Dict[str, Dict[str, Any]] = {}
_DOTENV_LOADED = False


@dataclass(frozen=True)
class StreamSettings:
    """Resolved client configuration.

    Attributes:
        endpoint: Absolute URL of the streaming chat function.
        api_key: Bearer token (``None`` sends no ``Authorization`` header).
        malformed_retry_limit: Retries granted to a malformed payload line.
        start_attempts: Attempts made to open the stream on retryable errors.
        timeouts: Transport timeouts.
    """

    endpoint: str
    api_key: Optional[str] = None
    malformed_retry_limit: int = DEFAULTS["malformed_retry_limit"]
    start_attempts: int = DEFAULTS["start_attempts"]
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)


def _load_dotenv_once() -> None:
    """Parse KEY=VALUE lines from the dotenv file, ignoring comments and blanks."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    _DOTENV_LOADED = True
    if not os.path.isfile(path):
        return
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip()
            if k and k not in os.environ:
                os.environ[k] = v.strip().strip('"').strip("'")


def _load_config_file() -> Dict[str, Any]:
    path = os.getenv("SSE_CHAT_CONFIG_FILE")
    if not path:
        return {}
    if path in _FILE_CACHE:
        return _FILE_CACHE[path]
    p = Path(path)
    data: Any = {}
    if p.exists():
        text = p.read_text(encoding="utf-8")
        if p.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            # YAML is a superset of JSON, so this also reads JSON without a suffix
            data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    _FILE_CACHE[path] = data
    return data


def _expand(value: Any) -> Any:
    return os.path.expandvars(value) if isinstance(value, str) else value


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name, env_name in ENV_FIELD_MAP.items():
        val = os.getenv(env_name)
        if val is not None and val.strip():
            out[name] = val.strip()
    return out


def _coerce_int(name: str, value: Any) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e
    if result < 0:
        raise ValueError(f"{name} must be >= 0, got {result}")
    return result


def get_stream_config(overrides: Optional[Dict[str, Any]] = None) -> StreamSettings:
    """Return merged configuration.

    Merge order (later wins): defaults -> config file -> env vars -> overrides.

    Raises:
        ValueError: a numeric field is not a non-negative integer, or the
            config file does not hold a mapping.
    """
    _load_dotenv_once()
    cfg: Dict[str, Any] = dict(DEFAULTS)
    cfg |= {k: _expand(v) for k, v in _load_config_file().items() if k in DEFAULTS}
    cfg |= _env_overrides()
    cfg |= {k: v for k, v in (overrides or {}).items() if v is not None}
    for name in _INT_FIELDS:
        cfg[name] = _coerce_int(name, cfg[name])
    return StreamSettings(
        endpoint=str(cfg["endpoint"]),
        api_key=cfg.get("api_key") or None,
        malformed_retry_limit=cfg["malformed_retry_limit"],
        start_attempts=max(1, cfg["start_attempts"]),
        timeouts=get_timeout_config(),
    )


def reset_config_cache() -> None:
    """Forget cached config files and allow the dotenv file to be re-read."""
    global _DOTENV_LOADED
    _FILE_CACHE.clear()
    _DOTENV_LOADED = False


__all__ = ["StreamSettings", "get_stream_config", "reset_config_cache", "ENV_FIELD_MAP"]
