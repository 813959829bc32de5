"""Terminal event creation and consolidated end-of-stream logging."""
from __future__ import annotations

import logging
from typing import Optional

from ..decoding.pipeline import DecodeStats
from ..errors import TransportError
from ..logging import LogContext, normalized_log_event
from .session import SessionState, StreamSession
from .streaming import TranscriptEvent
from .streaming_metrics import StreamMetrics

_EVENT_BY_STATE = {
    SessionState.COMPLETED: "stream.end",
    SessionState.CANCELLED: "stream.cancelled",
    SessionState.FAILED: "stream.error",
}


def finalize_stream(
    *,
    logger: logging.Logger,
    ctx: LogContext,
    session: StreamSession,
    metrics: StreamMetrics,
    stats: DecodeStats,
    state: SessionState,
    error: Optional[TransportError] = None,
    reason: Optional[str] = None,
) -> TranscriptEvent:
    """Move ``session`` to ``state``, log the outcome and build the terminal event."""
    session.terminate(state, error)
    normalized_log_event(
        logger,
        _EVENT_BY_STATE[state],
        ctx,
        phase="finalize",
        emitted=metrics.emitted,
        error_code=error.code.value if error else None,
        level=logging.ERROR if error else logging.INFO,
        state=state.value,
        saw_sentinel=session.saw_sentinel,
        chunks=metrics.chunks,
        lines=stats.lines,
        skipped=stats.skipped,
        malformed_retries=stats.malformed_retries,
        malformed_dropped=stats.malformed_dropped,
        transcript_chars=len(session.transcript),
        time_to_first_fragment_ms=metrics.time_to_first_fragment_ms,
        total_duration_ms=metrics.total_duration_ms,
        reason=reason,
        error=str(error) if error else None,
    )
    return TranscriptEvent(
        fragment="",
        transcript=session.transcript,
        finish=True,
        state=state,
        error=str(error) if error else None,
    )


__all__ = ["finalize_stream"]
