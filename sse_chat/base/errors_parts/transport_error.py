"""
Structured transport error exception type.

The only error that crosses the stream decoder boundary: malformed payloads
and unknown event types are absorbed inside the core.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class TransportError(Exception):
    """A failure to open or keep reading the response stream.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for display.
        endpoint: URL of the chat endpoint, when known.
        status_code: HTTP status returned before streaming began, if any.
        retryable: Hint for the start-phase retry policy.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    endpoint: Optional[str] = None
    status_code: Optional[int] = None
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __str__(self) -> str:
        status = f" [{self.status_code}]" if self.status_code is not None else ""
        return f"{self.code.value}{status}: {self.message}"


__all__ = ["TransportError"]
