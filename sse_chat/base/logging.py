"""Structured logging utilities for the chat stream layer.

Rationale:
- Central place to configure consistent JSON (or plain) logging.
- Avoid ad-hoc logger setup in the decoder, transport and CLI.

All loggers are children of the shared ``sse_chat`` logger, whose level is
read from ``SSE_CHAT_LOG_LEVEL``. ``log_event`` emits one JSON payload per
event; ``normalized_log_event`` guarantees the canonical keys ``phase``,
``emitted`` and ``error_code`` used by stream lifecycle events.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from typing import Any, Dict

from .log_support import JsonFormatter, LogContext

BASE_LOGGER_NAME = "sse_chat"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_BASE_LOGGER_ATTR = "_sse_chat_logger_initialized"
_CONSOLE_HANDLER_ATTR = "_sse_chat_console_handler"


def _parse_level(value: str | None, default: int = logging.INFO) -> int:
    """Parse a logging level name into its integer constant.

    Accepts DEBUG, INFO, WARN/WARNING, ERROR, CRITICAL case-insensitively and
    falls back to ``default`` on unknown values.
    """
    if not value:
        return default
    mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARN": logging.WARNING,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return mapping.get(value.strip().upper(), default)


def _make_formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _ensure_base_logger(json_mode: bool, level: int) -> logging.Logger:
    """Initialize and return the shared ``sse_chat`` logger."""
    logger = logging.getLogger(BASE_LOGGER_NAME)
    desired_level = _parse_level(os.getenv("SSE_CHAT_LOG_LEVEL"), default=level)
    if getattr(logger, _BASE_LOGGER_ATTR, False):
        logger.setLevel(desired_level)
        for existing in list(logger.handlers):
            if not getattr(existing, _CONSOLE_HANDLER_ATTR, False):
                continue
            stream_obj = getattr(existing, "stream", None)
            if stream_obj is None or getattr(stream_obj, "closed", False):
                # pytest capture swaps and closes stderr between tests
                logger.removeHandler(existing)
                with contextlib.suppress(Exception):
                    existing.close()
                logger.addHandler(_console_handler(json_mode, desired_level))
                continue
            existing.setLevel(desired_level)
            if hasattr(existing, "setStream"):
                with contextlib.suppress(Exception):
                    existing.setStream(sys.stderr)
            existing.setFormatter(_make_formatter(json_mode))
        return logger

    logger.setLevel(desired_level)
    logger.handlers[:] = [_console_handler(json_mode, desired_level)]
    logger.propagate = False
    setattr(logger, _BASE_LOGGER_ATTR, True)
    return logger


def _console_handler(json_mode: bool, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_make_formatter(json_mode))
    setattr(handler, _CONSOLE_HANDLER_ATTR, True)
    return handler


def get_logger(
    name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO
) -> logging.Logger:
    """Return ``name`` as a child of the configured base logger."""
    base_logger = _ensure_base_logger(json_mode=json_mode, level=level)
    if name == BASE_LOGGER_NAME:
        return base_logger
    if not name.startswith(BASE_LOGGER_NAME + "."):
        name = f"{BASE_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logger(*, level: int | str | None = None, json_mode: bool = True) -> logging.Logger:
    """Adjust the shared logger level and format at runtime (used by the CLI)."""
    logger = _ensure_base_logger(json_mode=json_mode, level=logging.INFO)
    if level is not None:
        if isinstance(level, str):
            level = _parse_level(level, default=logger.level)
        logger.setLevel(level)
        for h in logger.handlers:
            h.setLevel(level)
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Emit a structured log event as a single JSON payload.

    Keys whose values are ``None`` are dropped unless ``keep_none`` is set.
    """
    if not logger.isEnabledFor(level):
        return
    payload: Dict[str, Any] = {"event": event}
    if ctx:
        payload |= ctx.to_dict()
    if keep_none:
        payload.update(fields)
    else:
        payload.update({k: v for k, v in fields.items() if v is not None})
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


REQUIRED_NORMALIZED_KEYS = ("phase", "emitted")


def normalized_log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    phase: str,
    emitted: int | None = None,
    error_code: str | None = None,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Emit a lifecycle event with the canonical ``phase``/``emitted`` keys.

    ``error_code`` is omitted when ``None``; other ``None`` extras are dropped.
    Extras never clobber the normalized keys.
    """
    fields: Dict[str, Any] = {"phase": phase, "emitted": emitted}
    if error_code is not None:
        fields["error_code"] = error_code
    for k, v in extra_fields.items():
        if v is None or k in fields:
            continue
        fields[k] = v
    log_event(logger, event, ctx, level=level, keep_none=True, **fields)


__all__ = [
    "BASE_LOGGER_NAME",
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "normalized_log_event",
    "REQUIRED_NORMALIZED_KEYS",
]
