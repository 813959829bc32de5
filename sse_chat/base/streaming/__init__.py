"""Streaming package: session model, controllers, events and metrics."""

from .session import FINAL_STATES, SessionState, StreamSession
from .streaming import TranscriptEvent, final_transcript
from .streaming_metrics import StreamMetrics
from .streaming_finalize import finalize_stream
from .stream_controller import Observer, StreamController
from .async_stream_controller import AsyncStreamController

__all__ = [
    "SessionState",
    "StreamSession",
    "FINAL_STATES",
    "TranscriptEvent",
    "final_transcript",
    "StreamMetrics",
    "finalize_stream",
    "Observer",
    "StreamController",
    "AsyncStreamController",
]
