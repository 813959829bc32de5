"""sse_chat package

Streaming chat client for Server-Sent-Events chat completion endpoints.

Purpose:
    Decode ``text/event-stream`` responses chunk by chunk into a growing
    transcript, recovering from chunk boundaries that split lines, prefixes,
    JSON documents or multi-byte characters, and stopping on ``data: [DONE]``.

Public API (re-exported):
    - Controllers: :class:`StreamController`, :class:`AsyncStreamController`
    - Session model: :class:`StreamSession`, :class:`SessionState`
    - Clients: :class:`ChatClient`, :class:`AsyncChatClient`
    - Errors: :class:`TransportError`, :class:`ErrorCode`
    - Cancellation: :class:`CancellationToken`
"""

from .base.cancellation import CancellationToken
from .base.errors import ErrorCode, TransportError
from .base.streaming import (
    AsyncStreamController,
    SessionState,
    StreamController,
    StreamSession,
    TranscriptEvent,
)
from .client import AsyncChatClient, ChatBusyError, ChatClient

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CancellationToken",
    "ErrorCode",
    "TransportError",
    "StreamController",
    "AsyncStreamController",
    "StreamSession",
    "SessionState",
    "TranscriptEvent",
    "ChatClient",
    "AsyncChatClient",
    "ChatBusyError",
]
