"""Decode one SSE data payload into a tagged result.

``decode_payload`` never raises. A payload that is not valid JSON yields
:class:`Malformed`, which the pipeline treats as "wait for more data" rather
than as an error.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from ..constants import DONE_SENTINEL


@dataclass(frozen=True)
class Terminal:
    """The end-of-stream sentinel."""


@dataclass(frozen=True)
class Fragment:
    """Incremental content; ``text`` is empty for role or keep-alive chunks."""

    text: str


@dataclass(frozen=True)
class Malformed:
    """A payload that failed to parse."""

    payload: str
    reason: str


DecodeResult = Union[Terminal, Fragment, Malformed]

TERMINAL = Terminal()
_EMPTY = Fragment("")


def extract_delta_content(document: Any) -> str:
    """Return ``choices[0].delta.content`` or ``""`` when any level is missing."""
    if not isinstance(document, dict):
        return ""
    choices = document.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


def decode_payload(payload: str, *, sentinel: str = DONE_SENTINEL) -> DecodeResult:
    if payload == sentinel:
        return TERMINAL
    try:
        document = json.loads(payload)
    except (ValueError, RecursionError) as e:
        return Malformed(payload=payload, reason=str(e))
    content = extract_delta_content(document)
    return Fragment(content) if content else _EMPTY


__all__ = [
    "DecodeResult",
    "Terminal",
    "TERMINAL",
    "Fragment",
    "Malformed",
    "decode_payload",
    "extract_delta_content",
]
