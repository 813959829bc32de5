"""Pull-loop controller for one streamed chat response.

The controller owns a :class:`StreamSession` and drives the synchronous
:class:`StreamDecoder` with chunks pulled one at a time from a transport. It
is single-use: one controller, one request.

States: ``IDLE -> READING -> (DRAINING) -> COMPLETED | FAILED | CANCELLED``.

- ``[DONE]`` completes the session immediately; no further lines or chunks
  are processed and the transport is closed.
- End of data without the sentinel drains the carry-over and completes.
- Any transport failure (opening or reading) fails the session and is raised
  to the caller as :class:`TransportError`; nothing else is raised.
- Cancellation stops pulling, releases the transport and suppresses further
  observer notifications.
"""
from __future__ import annotations

import functools
import logging
import time
from contextlib import ExitStack, suppress
from typing import Callable, Iterable, Iterator, Optional, Union

from ..cancellation import CancellationToken
from ..constants import DEFAULT_MALFORMED_RETRY_LIMIT
from ..decoding.pipeline import DecodeStep, StreamDecoder
from ..errors import TransportError, to_transport_error
from ..logging import LogContext, get_logger, normalized_log_event
from .session import SessionState, StreamSession
from .streaming import TranscriptEvent
from .streaming_finalize import finalize_stream
from .streaming_metrics import StreamMetrics

Chunk = Union[str, bytes]
Observer = Callable[[str], None]


def register_stream_cleanup(stream: object, stack: ExitStack) -> None:
    """Close ``stream`` when ``stack`` unwinds, if it can be closed."""
    close = getattr(stream, "close", None)
    if callable(close):
        stack.callback(_close_quietly, stream)


def _close_quietly(stream: object) -> None:
    with suppress(Exception):
        stream.close()  # type: ignore[attr-defined]


class _ControllerBase:
    """State and bookkeeping shared by the sync and async pull loops."""

    def __init__(
        self,
        *,
        observer: Optional[Observer] = None,
        token: Optional[CancellationToken] = None,
        ctx: Optional[LogContext] = None,
        logger: Optional[logging.Logger] = None,
        malformed_retry_limit: int = DEFAULT_MALFORMED_RETRY_LIMIT,
    ) -> None:
        self.session = StreamSession()
        self.metrics = StreamMetrics()
        self._observer = observer
        self._token = token or CancellationToken()
        self._ctx = ctx or LogContext()
        if self._ctx.session_id is None:
            self._ctx.session_id = self.session.session_id
        self._logger = logger or get_logger("sse_chat.stream")
        self.decoder = StreamDecoder(
            self.session,
            malformed_retry_limit=malformed_retry_limit,
            logger=self._logger,
            ctx=self._ctx,
        )
        self._started = False
        self._t0 = 0.0
        self._terminal_event: Optional[TranscriptEvent] = None

    # API -----------------------------------------------------------------
    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation; safe after completion."""
        self._token.cancel(reason)

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def transcript(self) -> str:
        return self.session.transcript

    @property
    def finished(self) -> bool:  # noqa: D401 - short property
        """Whether the session reached a final state."""
        return self.session.terminated

    @property
    def terminal_event(self) -> Optional[TranscriptEvent]:
        return self._terminal_event

    # Lifecycle -------------------------------------------------------------
    def _begin(self) -> None:
        if self._started:
            raise RuntimeError("stream controller is single-use")
        self._started = True
        self._t0 = time.perf_counter()
        normalized_log_event(self._logger, "stream.start", self._ctx, phase="start", emitted=0)

    def _finish(
        self,
        state: SessionState,
        *,
        error: Optional[TransportError] = None,
        reason: Optional[str] = None,
    ) -> TranscriptEvent:
        self.metrics.total_duration_ms = (time.perf_counter() - self._t0) * 1000.0
        self._terminal_event = finalize_stream(
            logger=self._logger,
            ctx=self._ctx,
            session=self.session,
            metrics=self.metrics,
            stats=self.decoder.stats,
            state=state,
            error=error,
            reason=reason,
        )
        return self._terminal_event

    def _fail(self, exc: BaseException) -> TransportError:
        err = to_transport_error(exc, self._ctx.endpoint)
        self._finish(SessionState.FAILED, error=err)
        return err

    def _cancelled(self) -> TranscriptEvent:
        return self._finish(SessionState.CANCELLED, reason=self._token.reason)

    def _deliver(self, step: DecodeStep) -> TranscriptEvent:
        if self.metrics.emitted == 0:
            self.metrics.time_to_first_fragment_ms = (time.perf_counter() - self._t0) * 1000.0
        self.metrics.emitted += 1
        if self._observer is not None:
            self._observer(step.transcript)
        return TranscriptEvent(fragment=step.fragment, transcript=step.transcript)

    def _consume(self, steps: Iterable[DecodeStep]) -> Iterator[TranscriptEvent]:
        """Turn decoder steps into events, honouring cancellation and ``[DONE]``."""
        for step in steps:
            if self._token.cancelled:
                yield self._cancelled()
                return
            if step.terminal:
                self.session.saw_sentinel = True
                yield self._finish(SessionState.COMPLETED)
                return
            yield self._deliver(step)
            if self._token.cancelled:
                # the transcript never runs ahead of what the observer was shown
                yield self._cancelled()
                return

    def _drain(self) -> Iterator[TranscriptEvent]:
        """Process the carry-over after end of data, then complete."""
        if self._token.cancelled:
            yield self._cancelled()
            return
        self.session.begin(SessionState.DRAINING)
        yield from self._consume(self.decoder.finish())
        if not self.session.terminated:
            yield self._finish(SessionState.COMPLETED)


class StreamController(_ControllerBase):
    """Synchronous pull loop over an iterable of text or byte chunks.

    Parameters:
        starter: Zero-argument callable opening the transport and returning an
            iterable of chunks (e.g. ``lambda: transport.open(body)``). Errors
            raised here fail the session before it starts reading.
        observer: Called with the full transcript after every decoded data
            line, in arrival order.
        token: Cancellation token; a fresh one is created when omitted.
        ctx: Logging context (endpoint, request id).
        malformed_retry_limit: Retries granted to a malformed payload line.

    Iterating the controller yields one :class:`TranscriptEvent` per observer
    notification followed by a single terminal event; :meth:`run` does the
    same without collecting events.
    """

    def __init__(
        self,
        starter: Callable[[], Iterable[Chunk]],
        *,
        observer: Optional[Observer] = None,
        token: Optional[CancellationToken] = None,
        ctx: Optional[LogContext] = None,
        logger: Optional[logging.Logger] = None,
        malformed_retry_limit: int = DEFAULT_MALFORMED_RETRY_LIMIT,
    ) -> None:
        super().__init__(
            observer=observer,
            token=token,
            ctx=ctx,
            logger=logger,
            malformed_retry_limit=malformed_retry_limit,
        )
        self._starter = starter

    @classmethod
    def over(cls, chunks: Iterable[Chunk], **kwargs) -> "StreamController":
        """Build a controller reading from an already open iterable."""
        return cls(lambda: chunks, **kwargs)

    def __iter__(self) -> Iterator[TranscriptEvent]:
        return self.events()

    def run(self) -> StreamSession:
        """Drive the stream to a final state and return the session.

        Raises:
            TransportError: the transport failed to open or broke mid-stream.
        """
        for _ in self.events():
            pass
        return self.session

    def events(self) -> Iterator[TranscriptEvent]:
        self._begin()
        if self._token.cancelled:
            yield self._cancelled()
            return
        try:
            stream = self._starter()
        except Exception as e:
            raise self._fail(e) from e

        with ExitStack() as stack:
            register_stream_cleanup(stream, stack)
            # Closing the transport releases a read blocked in another thread.
            release = functools.partial(_close_quietly, stream)
            self._token.on_cancel(release)
            stack.callback(self._token.remove_callback, release)
            self.session.begin(SessionState.READING)
            try:
                yield from self._pull(iter(stream))
            finally:
                if not self.session.terminated:
                    # consumer abandoned the iterator or the observer raised
                    self._finish(SessionState.CANCELLED, reason="aborted")

    def _pull(self, chunks: Iterator[Chunk]) -> Iterator[TranscriptEvent]:
        while True:
            if self._token.cancelled:
                yield self._cancelled()
                return
            try:
                chunk = next(chunks)
            except StopIteration:
                break
            except Exception as e:
                if self._token.cancelled:
                    yield self._cancelled()
                    return
                raise self._fail(e) from e
            if self._token.cancelled:
                yield self._cancelled()
                return
            self.metrics.chunks += 1
            yield from self._consume(self.decoder.feed(chunk))
            if self.session.terminated:
                return
        yield from self._drain()


__all__ = ["StreamController", "Observer", "register_stream_cleanup"]
