"""Unit tests for the tagged payload decoder."""
from __future__ import annotations

import pytest

from sse_chat.base.decoding import TERMINAL, Fragment, Malformed, Terminal, decode_payload


def test_sentinel_is_terminal():
    result = decode_payload("[DONE]")
    assert isinstance(result, Terminal)  # nosec B101
    assert result == TERMINAL  # nosec B101


def test_content_fragment_is_extracted():
    result = decode_payload('{"choices":[{"delta":{"content":"Hel"}}]}')
    assert result == Fragment("Hel")  # nosec B101


@pytest.mark.parametrize(
    "payload",
    [
        '{"choices":[{"delta":{"role":"assistant"}}]}',
        '{"choices":[{"delta":{}, "finish_reason":"stop"}]}',
        '{"choices":[{"delta":{"content":null}}]}',
        '{"choices":[{"delta":{"content":""}}]}',
        '{"choices":[{"delta":{"content":7}}]}',
        '{"choices":[]}',
        '{"choices":{"delta":{"content":"x"}}}',
        '{"choices":["x"]}',
        '{"usage":{"total_tokens":3}}',
        '{"a":1}',
        "[1, 2]",
        '"text"',
        "42",
    ],
)
def test_structural_payloads_are_empty_fragments(payload):
    assert decode_payload(payload) == Fragment("")  # nosec B101


@pytest.mark.parametrize("payload", ['{"choices":[{"delta":{"content":"Hel', '{"a"', "not json", "[DONE"])
def test_unparsable_payloads_are_malformed(payload):
    result = decode_payload(payload)
    assert isinstance(result, Malformed)  # nosec B101
    assert result.payload == payload  # nosec B101
    assert result.reason  # nosec B101


def test_custom_sentinel():
    assert isinstance(decode_payload("<eos>", sentinel="<eos>"), Terminal)  # nosec B101
    assert isinstance(decode_payload("[DONE]", sentinel="<eos>"), Malformed)  # nosec B101
