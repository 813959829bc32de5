"""Line framing over arbitrarily split text chunks."""
from __future__ import annotations

from typing import Iterator, Optional

from ..constants import CARRIAGE_RETURN, LINE_TERMINATOR


class LineFramer:
    """Reassemble complete lines from text chunks.

    The carry-over buffer holds everything received but not yet handed out as
    a line. Lines are cut lazily: a line leaves the buffer only when the
    iterator returned by :meth:`feed` yields it, so a consumer that stops
    early leaves the remaining lines buffered in arrival order.
    """

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received but not yet framed."""
        return self._buffer

    def feed(self, chunk: str) -> Iterator[str]:
        """Append ``chunk`` and return an iterator over the complete lines.

        Each line has its terminator and one trailing ``\\r`` removed.
        """
        self._buffer += chunk
        return self._drain()

    def _drain(self) -> Iterator[str]:
        while True:
            idx = self._buffer.find(LINE_TERMINATOR)
            if idx == -1:
                return
            line = self._buffer[:idx]
            self._buffer = self._buffer[idx + 1:]
            if line.endswith(CARRIAGE_RETURN):
                line = line[:-1]
            yield line

    def rollback(self, line: str) -> None:
        """Put ``line`` back in front of the buffer, terminator included."""
        self._buffer = line + LINE_TERMINATOR + self._buffer

    def flush(self) -> Optional[str]:
        """Return and clear an unterminated residual (``None`` when empty)."""
        residual, self._buffer = self._buffer, ""
        if not residual:
            return None
        if residual.endswith(CARRIAGE_RETURN):
            residual = residual[:-1]
        return residual


__all__ = ["LineFramer"]
