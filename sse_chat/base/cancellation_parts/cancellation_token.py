"""Cooperative cancellation token implementation.

Exposes ``CancellationToken``: a thread-safe flag with an optional reason and
one-shot callbacks. Stream controllers poll it between pulls and register a
callback that closes the transport so a blocked read is released promptly.
"""

from __future__ import annotations

from contextlib import suppress
from threading import Lock
from typing import Callable, List, Optional

from .cancelled_error import CancelledError


class CancellationToken:
    """A cooperative cancellation token.

    ``cancel`` is idempotent: the first reason wins and callbacks fire once.
    Callbacks registered after cancellation run immediately.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._lock = Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation and run registered callbacks once."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._reason = reason
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for cb in callbacks:
            # A failing release hook must not prevent the others from running.
            with suppress(Exception):
                cb()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run when cancellation is requested."""
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        with suppress(Exception):
            callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Forget ``callback`` if it has not run yet."""
        with self._lock, suppress(ValueError):
            self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if the token is cancelled."""
        if self._cancelled:
            raise CancelledError(self._reason or "stream cancelled")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._cancelled}, reason={self._reason!r})"


__all__ = ["CancellationToken"]
