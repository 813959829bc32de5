"""Cancellation error type.

Defines the public ``CancelledError`` used to signal that a caller abandoned
interest in a stream session. Kept isolated to satisfy one-class-per-file
policy.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when a stream session observes a cancellation request.

    Distinguishes cooperative cancellation from transport failures so the
    controller can end the session quietly instead of reporting an error.
    """

__all__ = ["CancelledError"]
