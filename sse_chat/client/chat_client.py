"""Chat clients keeping the conversation and streaming each reply.

Every send posts the whole history (oldest first) so the endpoint stays
stateless. The reply is streamed through a stream controller; the observer
receives the growing transcript, and the final transcript is stored as the
assistant turn.

Failure modes:
    - Blank input is ignored (``None`` is returned, nothing is sent).
    - A send while another is streaming raises :class:`ChatBusyError`.
    - :class:`TransportError` propagates to the caller; the user turn stays in
      the history and no assistant turn is stored.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Tuple

import httpx

from ..base.cancellation import CancellationToken
from ..base.dto import ChatMessageDTO, ChatRequestDTO
from ..base.http import AsyncHttpStreamTransport, HttpStreamTransport
from ..base.logging import LogContext, get_logger
from ..base.resilience.retry import RetryConfig
from ..base.streaming import AsyncStreamController, Observer, SessionState, StreamController, StreamSession
from ..config import StreamSettings, get_stream_config


class ChatBusyError(RuntimeError):
    """Raised when a message is sent while a reply is still streaming."""


class _Conversation:
    """History and busy-flag bookkeeping shared by both clients."""

    def __init__(self, *, malformed_retry_limit: int, logger: Optional[logging.Logger]) -> None:
        self._history: List[ChatMessageDTO] = []
        self._busy = False
        self._malformed_retry_limit = malformed_retry_limit
        self._logger = logger or get_logger("sse_chat.client")

    @property
    def history(self) -> Tuple[ChatMessageDTO, ...]:
        return tuple(self._history)

    @property
    def busy(self) -> bool:
        return self._busy

    def reset(self) -> None:
        """Forget the conversation."""
        if self._busy:
            raise ChatBusyError("cannot reset while a reply is streaming")
        self._history.clear()

    def _prepare(self, text: str) -> Optional[dict]:
        """Record the user turn and return the request body (``None`` for blank input)."""
        if not text or not text.strip():
            return None
        if self._busy:
            raise ChatBusyError("a reply is already streaming")
        self._history.append(ChatMessageDTO(role="user", content=text))
        return ChatRequestDTO(messages=self._history).to_body()

    def _record_reply(self, session: StreamSession) -> str:
        reply = session.transcript
        # A cancelled session keeps what was already shown to the user.
        if session.state in (SessionState.COMPLETED, SessionState.CANCELLED) and reply.strip():
            self._history.append(ChatMessageDTO(role="assistant", content=reply))
        return reply

    def _context(self, endpoint: str) -> LogContext:
        return LogContext(endpoint=endpoint, request_id=uuid.uuid4().hex)


class ChatClient(_Conversation):
    """Synchronous chat client over :class:`HttpStreamTransport`."""

    def __init__(
        self,
        transport: HttpStreamTransport,
        *,
        malformed_retry_limit: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(malformed_retry_limit=malformed_retry_limit, logger=logger)
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Optional[StreamSettings] = None, *, client: Optional[httpx.Client] = None
    ) -> "ChatClient":
        """Build a client from :func:`get_stream_config` (or ``settings``)."""
        settings = settings or get_stream_config()
        transport = HttpStreamTransport(
            settings.endpoint,
            api_key=settings.api_key,
            client=client,
            timeouts=settings.timeouts,
            retry_config=RetryConfig(max_attempts=settings.start_attempts),
        )
        return cls(transport, malformed_retry_limit=settings.malformed_retry_limit)

    def send(
        self,
        text: str,
        observer: Optional[Observer] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """Send ``text`` and stream the reply; return the final transcript.

        Raises:
            ChatBusyError: another reply is streaming.
            TransportError: the request failed to start or broke mid-stream.
        """
        body = self._prepare(text)
        if body is None:
            return None
        controller = StreamController(
            lambda: self._transport.open(body),
            observer=observer,
            token=token,
            ctx=self._context(self._transport.endpoint),
            logger=self._logger,
            malformed_retry_limit=self._malformed_retry_limit,
        )
        self._busy = True
        try:
            session = controller.run()
        finally:
            self._busy = False
        return self._record_reply(session)


class AsyncChatClient(_Conversation):
    """Asyncio chat client over :class:`AsyncHttpStreamTransport`."""

    def __init__(
        self,
        transport: AsyncHttpStreamTransport,
        *,
        malformed_retry_limit: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(malformed_retry_limit=malformed_retry_limit, logger=logger)
        self._transport = transport

    async def asend(
        self,
        text: str,
        observer: Optional[Observer] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """Async twin of :meth:`ChatClient.send`."""
        body = self._prepare(text)
        if body is None:
            return None
        controller = AsyncStreamController(
            lambda: self._transport.open(body),
            observer=observer,
            token=token,
            ctx=self._context(self._transport.endpoint),
            logger=self._logger,
            malformed_retry_limit=self._malformed_retry_limit,
        )
        self._busy = True
        try:
            session = await controller.run()
        finally:
            self._busy = False
        return self._record_reply(session)

    async def aclose(self) -> None:
        await self._transport.aclose()


__all__ = ["ChatClient", "AsyncChatClient", "ChatBusyError"]
