"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose the cancellation constructs used by stream controllers via the
canonical ``sse_chat.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` is polled by the pull loop between chunks and before
  every observer notification; callbacks registered on it run once when
  cancellation is requested so a controller can release its transport.
- ``CancelledError`` is raised by ``raise_if_cancelled``.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
