"""Streaming metrics collected for a single session."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class StreamMetrics:
    """Timing and volume counters for one stream session.

    ``emitted`` counts observer notifications; line-level counters live on
    :class:`~sse_chat.base.decoding.DecodeStats`.
    """

    chunks: int = 0
    emitted: int = 0
    time_to_first_fragment_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None


__all__ = ["StreamMetrics"]
