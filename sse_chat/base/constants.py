"""Wire-level constants for the Server-Sent Events chat protocol.

Central location to avoid scattering magic strings across the framer,
classifier and decoder.
"""
from __future__ import annotations

# Line framing
LINE_TERMINATOR = "\n"
CARRIAGE_RETURN = "\r"

# Event classification
COMMENT_MARKER = ":"
DATA_PREFIX = "data: "

# Explicit end-of-stream payload
DONE_SENTINEL = "[DONE]"

# Number of retries granted to a malformed payload line before it is dropped
DEFAULT_MALFORMED_RETRY_LIMIT = 1

__all__ = [
    "LINE_TERMINATOR",
    "CARRIAGE_RETURN",
    "COMMENT_MARKER",
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "DEFAULT_MALFORMED_RETRY_LIMIT",
]
