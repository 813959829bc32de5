"""Stream error taxonomy public surface.

Re-exports the one-class-per-file implementations under
``sse_chat.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.transport_error import TransportError
from .errors_parts.classification import classify_exception, code_for_status, to_transport_error

__all__ = ["ErrorCode", "TransportError", "classify_exception", "code_for_status", "to_transport_error"]
