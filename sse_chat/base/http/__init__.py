"""HTTP transport package: pooled clients and streaming chat transports."""

from .client import close_all_clients, get_httpx_client
from .transport import (
    AsyncHttpStreamTransport,
    AsyncResponseStream,
    HttpStreamTransport,
    ResponseStream,
)

__all__ = [
    "get_httpx_client",
    "close_all_clients",
    "HttpStreamTransport",
    "AsyncHttpStreamTransport",
    "ResponseStream",
    "AsyncResponseStream",
]
