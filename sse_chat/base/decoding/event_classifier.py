"""Classify framed SSE lines."""
from __future__ import annotations

from typing import Optional

from ..constants import COMMENT_MARKER, DATA_PREFIX


def classify_line(line: str, *, prefix: str = DATA_PREFIX) -> Optional[str]:
    """Return the payload carried by ``line`` or ``None`` to skip it.

    Skipped: blank lines, ``:`` comments (keep-alives), lines without the
    data prefix (``event:``, ``id:``, ``retry:`` and future fields) and data
    lines whose payload is empty.
    """
    if not line.strip() or line.startswith(COMMENT_MARKER):
        return None
    if not line.startswith(prefix):
        return None
    return line[len(prefix):].strip() or None


__all__ = ["classify_line"]
