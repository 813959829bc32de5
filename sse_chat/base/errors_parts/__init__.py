"""Errors parts package public surface.

Prefer importing from ``sse_chat.base.errors`` for the stable surface.
"""

from .error_code import ErrorCode
from .transport_error import TransportError
from .classification import classify_exception, to_transport_error

__all__ = ["ErrorCode", "TransportError", "classify_exception", "to_transport_error"]
