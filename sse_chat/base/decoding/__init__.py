"""Synchronous SSE decoding pipeline.

transport chunk -> :class:`LineFramer` -> :func:`classify_line` ->
:func:`decode_payload` -> :func:`accumulate`. :class:`StreamDecoder` wires the
stages together for one session; it never suspends and never raises for
malformed or unknown input.
"""

from .line_framer import LineFramer
from .event_classifier import classify_line
from .payload_decoder import TERMINAL, DecodeResult, Fragment, Malformed, Terminal, decode_payload
from .accumulator import accumulate
from .pipeline import DecodeStats, DecodeStep, StreamDecoder

__all__ = [
    "LineFramer",
    "classify_line",
    "decode_payload",
    "DecodeResult",
    "Terminal",
    "TERMINAL",
    "Fragment",
    "Malformed",
    "accumulate",
    "StreamDecoder",
    "DecodeStep",
    "DecodeStats",
]
