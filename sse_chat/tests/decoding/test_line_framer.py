"""Unit tests for the carry-over line framer."""
from __future__ import annotations

from sse_chat.base.decoding import LineFramer


def test_complete_lines_are_yielded_and_residual_kept():
    framer = LineFramer()
    assert list(framer.feed("alpha\nbe")) == ["alpha"]  # nosec B101 - pytest assert in tests
    assert framer.pending == "be"  # nosec B101
    assert list(framer.feed("ta\r\ngamma\n")) == ["beta", "gamma"]  # nosec B101
    assert framer.pending == ""  # nosec B101


def test_only_one_trailing_carriage_return_is_stripped():
    framer = LineFramer()
    assert list(framer.feed("x\r\r\n\r\n")) == ["x\r", ""]  # nosec B101


def test_framing_is_lazy_and_unread_lines_stay_buffered():
    framer = LineFramer()
    lines = framer.feed("one\ntwo\nthree\n")
    assert next(lines) == "one"  # nosec B101
    # abandoning the iterator leaves the rest in order
    assert framer.pending == "two\nthree\n"  # nosec B101


def test_rollback_prepends_line_with_terminator():
    framer = LineFramer()
    lines = framer.feed("first\nsecond\n")
    failed = next(lines)
    framer.rollback(failed)
    assert framer.pending == "first\nsecond\n"  # nosec B101
    assert list(framer.feed("third")) == ["first", "second"]  # nosec B101
    assert framer.pending == "third"  # nosec B101


def test_flush_returns_residual_once():
    framer = LineFramer()
    list(framer.feed("done\npartial\r"))
    assert framer.flush() == "partial"  # nosec B101
    assert framer.flush() is None  # nosec B101
    assert framer.pending == ""  # nosec B101


def test_buffer_plus_emitted_lines_reconstruct_the_input():
    text = "data: a\n\n: ping\ndata: {\"x\": 1}\ndata: tail"
    framer = LineFramer()
    emitted = []
    for i in range(0, len(text), 3):
        emitted.extend(framer.feed(text[i:i + 3]))
    rebuilt = "".join(line + "\n" for line in emitted) + framer.pending
    assert rebuilt == text  # nosec B101
