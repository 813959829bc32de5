"""Per-session decoding pipeline shared by the sync and async controllers.

Malformed payload policy
------------------------
A data line whose JSON fails to parse is assumed to be truncated. The line is
rolled back onto the front of the carry-over buffer, the rest of the current
batch stays buffered (framing is lazy, so nothing is extracted out of order)
and the decoder reports that it is awaiting more data. The next chunk
re-frames the same line first. After ``malformed_retry_limit`` unsuccessful
retries, or when the transport has ended, the line is dropped with a warning
event instead of blocking the session forever.
"""
from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional, Union

from ..constants import DATA_PREFIX, DEFAULT_MALFORMED_RETRY_LIMIT, DONE_SENTINEL
from ..logging import LogContext, log_event
from .accumulator import accumulate
from .event_classifier import classify_line
from .payload_decoder import Fragment, Malformed, Terminal, decode_payload

if TYPE_CHECKING:
    from ..streaming.session import StreamSession


@dataclass(frozen=True)
class DecodeStep:
    """Outcome of one data line that reached the accumulator or the sentinel."""

    fragment: str
    transcript: str
    terminal: bool = False


@dataclass
class DecodeStats:
    """Line-level counters for one session."""

    lines: int = 0
    skipped: int = 0
    fragments: int = 0
    malformed_retries: int = 0
    malformed_dropped: int = 0


class StreamDecoder:
    """Drive framing, classification, decoding and accumulation for a session.

    Accepts ``str`` or ``bytes`` chunks; bytes go through an incremental UTF-8
    decoder so multi-byte characters split across chunks survive.
    """

    def __init__(
        self,
        session: "StreamSession",
        *,
        malformed_retry_limit: int = DEFAULT_MALFORMED_RETRY_LIMIT,
        data_prefix: str = DATA_PREFIX,
        sentinel: str = DONE_SENTINEL,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self.session = session
        self.stats = DecodeStats()
        self._retry_limit = max(0, malformed_retry_limit)
        self._prefix = data_prefix
        self._sentinel = sentinel
        self._logger = logger
        self._ctx = ctx
        self._bytes_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._retry_line: Optional[str] = None
        self._retry_count = 0
        self.awaiting_more_data = False
        self.terminated = False

    def feed(self, chunk: Union[str, bytes]) -> Iterator[DecodeStep]:
        """Process one transport chunk, yielding a step per decoded data line.

        Stops after the sentinel (``terminal=True`` step) or when a malformed
        line has been rolled back.
        """
        if self.terminated:
            return
        text = self._bytes_decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        self.awaiting_more_data = False
        yield from self._run(self.session.framer.feed(text), final=False)

    def finish(self) -> Iterator[DecodeStep]:
        """Drain the carry-over once the transport has no more data.

        Buffered complete lines are processed, then an unterminated residual is
        treated as a last line. Malformed lines are dropped, not retried.
        """
        if self.terminated:
            return
        tail = self._bytes_decoder.decode(b"", final=True)
        self.awaiting_more_data = False
        yield from self._run(self.session.framer.feed(tail), final=True)
        if self.terminated:
            return
        residual = self.session.framer.flush()
        if residual is not None:
            yield from self._run(iter((residual,)), final=True)

    def _run(self, lines: Iterator[str], *, final: bool) -> Iterator[DecodeStep]:
        for line in lines:
            self.stats.lines += 1
            payload = classify_line(line, prefix=self._prefix)
            if payload is None:
                self.stats.skipped += 1
                continue
            result = decode_payload(payload, sentinel=self._sentinel)
            if isinstance(result, Terminal):
                self.terminated = True
                self._clear_retry()
                yield DecodeStep(fragment="", transcript=self.session.transcript, terminal=True)
                return
            if isinstance(result, Malformed):
                if self._hold_for_retry(line, result, final=final):
                    return
                continue
            self._clear_retry()
            yield self._accumulate(result)

    def _accumulate(self, fragment: Fragment) -> DecodeStep:
        self.stats.fragments += 1
        transcript = accumulate(self.session, fragment.text)
        return DecodeStep(fragment=fragment.text, transcript=transcript)

    def _hold_for_retry(self, line: str, result: Malformed, *, final: bool) -> bool:
        """Roll ``line`` back for another attempt, or drop it; True when held."""
        if line != self._retry_line:
            self._retry_line = line
            self._retry_count = 0
        if final or self._retry_count >= self._retry_limit:
            self.stats.malformed_dropped += 1
            self._log("stream.decode_dropped", logging.WARNING, result, attempts=self._retry_count)
            self._clear_retry()
            return False
        self._retry_count += 1
        self.stats.malformed_retries += 1
        self.session.framer.rollback(line)
        self.awaiting_more_data = True
        self._log("stream.decode_retry", logging.DEBUG, result, attempts=self._retry_count)
        return True

    def _clear_retry(self) -> None:
        self._retry_line = None
        self._retry_count = 0

    def _log(self, event: str, level: int, result: Malformed, **fields) -> None:
        if self._logger is None:
            return
        log_event(
            self._logger,
            event,
            self._ctx,
            level=level,
            reason=result.reason,
            payload_preview=result.payload[:80],
            **fields,
        )


__all__ = ["StreamDecoder", "DecodeStep", "DecodeStats"]
