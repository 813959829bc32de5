"""Asyncio pull loop sharing the decoding pipeline of :class:`StreamController`.

Awaiting the next chunk is the only suspension point; decoding and observer
notification run synchronously inside the task that iterates the controller.
A read still waiting on the transport is abandoned as soon as the
cancellation token fires. Task cancellation (``asyncio.CancelledError``)
ends the session as ``CANCELLED`` and is re-raised.
"""
from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from contextlib import suppress
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Optional, Union

from ..cancellation import CancellationToken
from ..constants import DEFAULT_MALFORMED_RETRY_LIMIT
from ..logging import LogContext
from .session import SessionState, StreamSession
from .stream_controller import Chunk, Observer, _ControllerBase
from .streaming import TranscriptEvent

AsyncStarter = Callable[[], Union[AsyncIterable[Chunk], Awaitable[AsyncIterable[Chunk]]]]

_EXHAUSTED = object()
_INTERRUPTED = object()


async def _anext(chunks: AsyncIterator[Chunk]) -> object:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return _EXHAUSTED


async def _read(chunks: AsyncIterator[Chunk], interrupted: asyncio.Event) -> object:
    """Await the next chunk unless ``interrupted`` is set first.

    Returns the chunk, ``_EXHAUSTED`` at end of data or ``_INTERRUPTED`` when
    the pending read was abandoned.
    """
    pending = asyncio.ensure_future(_anext(chunks))
    waiter = asyncio.ensure_future(interrupted.wait())
    try:
        await asyncio.wait({pending, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not pending.done():
            pending.cancel()
            # the source must see the cancellation before it is closed
            await asyncio.wait({pending})
    if pending.cancelled():
        return _INTERRUPTED
    return pending.result()


async def _aclose_quietly(stream: object) -> None:
    for name in ("aclose", "close"):
        closer = getattr(stream, name, None)
        if callable(closer):
            with suppress(Exception):
                result = closer()
                if inspect.isawaitable(result):
                    await result
            return


class AsyncStreamController(_ControllerBase):
    """Asyncio twin of :class:`StreamController`.

    ``starter`` may be a coroutine function (``transport.open``) or a plain
    callable returning an async iterable.
    """

    def __init__(
        self,
        starter: AsyncStarter,
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
    def over(cls, chunks: AsyncIterable[Chunk], **kwargs) -> "AsyncStreamController":
        """Build a controller reading from an already open async iterable."""
        return cls(lambda: chunks, **kwargs)

    def __aiter__(self) -> AsyncIterator[TranscriptEvent]:
        return self.events()

    async def run(self) -> StreamSession:
        """Drive the stream to a final state and return the session."""
        async for _ in self.events():
            pass
        return self.session

    async def events(self) -> AsyncIterator[TranscriptEvent]:
        self._begin()
        if self._token.cancelled:
            yield self._cancelled()
            return
        try:
            opened = self._starter()
            stream = await opened if inspect.isawaitable(opened) else opened
        except asyncio.CancelledError:
            self._finish(SessionState.CANCELLED, reason="task cancelled")
            raise
        except Exception as e:
            raise self._fail(e) from e

        self.session.begin(SessionState.READING)
        chunks = stream.__aiter__()
        interrupted = asyncio.Event()
        # releases a read that is waiting on the server
        release = functools.partial(asyncio.get_running_loop().call_soon_threadsafe, interrupted.set)
        self._token.on_cancel(release)
        try:
            while True:
                if self._token.cancelled:
                    yield self._cancelled()
                    return
                try:
                    chunk = await _read(chunks, interrupted)
                except asyncio.CancelledError:
                    self._finish(SessionState.CANCELLED, reason="task cancelled")
                    raise
                except Exception as e:
                    if self._token.cancelled:
                        yield self._cancelled()
                        return
                    raise self._fail(e) from e
                if chunk is _EXHAUSTED:
                    break
                if chunk is _INTERRUPTED or self._token.cancelled:
                    yield self._cancelled()
                    return
                self.metrics.chunks += 1
                for evt in self._consume(self.decoder.feed(chunk)):
                    yield evt
                if self.session.terminated:
                    return
            for evt in self._drain():
                yield evt
        finally:
            self._token.remove_callback(release)
            if chunks is not stream:
                await _aclose_quietly(chunks)
            await _aclose_quietly(stream)
            if not self.session.terminated:
                self._finish(SessionState.CANCELLED, reason="aborted")


__all__ = ["AsyncStreamController"]
