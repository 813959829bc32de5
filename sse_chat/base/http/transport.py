"""Streaming HTTP transports for the chat endpoint.

A transport POSTs the conversation to the endpoint and hands back the open
response body as an iterable of raw byte chunks. Everything that can go wrong
before the first chunk (connection refused, non-success status) is raised
from ``open`` as a :class:`TransportError`, so a stream controller never
enters its reading state for a request that failed to start. Failures while
reading are re-raised from iteration as :class:`TransportError` too.

Timeout/Retry:
    - Per-phase timeouts come from :func:`get_timeout_config`.
    - ``open`` is wrapped with the start-phase retry policy; reading is not
      retried.
"""
from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Iterator, Mapping, Optional

import httpx

from ..errors import TransportError, to_transport_error
from ..errors_parts.classification import code_for_status
from ..errors_parts.error_code import RETRYABLE_CODES
from ..logging import LogContext, get_logger, log_event
from ..resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig, async_retry, retry
from ..timeouts import TimeoutConfig, get_timeout_config
from .client import get_httpx_client

_ERROR_BODY_LIMIT = 200


def _build_headers(api_key: Optional[str]) -> Dict[str, str]:
    headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _status_error(response: httpx.Response, endpoint: str) -> TransportError:
    """Build the error for a non-success response whose body has been read."""
    try:
        detail = response.text.strip()[:_ERROR_BODY_LIMIT]
    except Exception:  # undecodable body
        detail = ""
    code = code_for_status(response.status_code)
    return TransportError(
        code=code,
        message=detail or f"chat endpoint returned HTTP {response.status_code}",
        endpoint=endpoint,
        status_code=response.status_code,
        retryable=code in RETRYABLE_CODES,
    )


class ResponseStream:
    """Byte chunks of an open streaming response.

    Iterating pulls one chunk at a time from the socket; ``close`` releases the
    connection and is safe to call more than once.
    """

    def __init__(self, response: httpx.Response, endpoint: str) -> None:
        self._response = response
        self._endpoint = endpoint

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def __iter__(self) -> Iterator[bytes]:
        try:
            yield from self._response.iter_bytes()
        except httpx.HTTPError as e:
            raise to_transport_error(e, self._endpoint) from e

    def close(self) -> None:
        self._response.close()


class AsyncResponseStream:
    """Asyncio twin of :class:`ResponseStream`."""

    def __init__(self, response: httpx.Response, endpoint: str) -> None:
        self._response = response
        self._endpoint = endpoint

    @property
    def status_code(self) -> int:
        return self._response.status_code

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            raise to_transport_error(e, self._endpoint) from e

    async def aclose(self) -> None:
        await self._response.aclose()


class HttpStreamTransport:
    """Open streaming chat completions over a synchronous ``httpx.Client``.

    Parameters:
        endpoint: Absolute URL of the chat function.
        api_key: Bearer token sent in the ``Authorization`` header.
        client: Optional client to use instead of the shared pool (tests pass
            a client backed by ``httpx.MockTransport`` or FastAPI's
            ``TestClient``).
        timeouts: Overrides :func:`get_timeout_config`.
        retry_config: Start-phase retry policy.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeouts: Optional[TimeoutConfig] = None,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    ) -> None:
        self.endpoint = endpoint
        self._api_key = api_key
        self._client = client
        self._timeouts = timeouts
        self._retry_config = retry_config
        self._logger = get_logger("sse_chat.transport")

    def open(self, body: Mapping[str, Any]) -> ResponseStream:
        """POST ``body`` and return the open response stream.

        Raises:
            TransportError: connection failure or non-success status, after
                the start-phase retry policy is exhausted.
        """
        return retry(self._retry_config)(self._open_once)(body)

    def _open_once(self, body: Mapping[str, Any]) -> ResponseStream:
        client = self._client or get_httpx_client(None, purpose="chat.stream")
        timeout = (self._timeouts or get_timeout_config()).to_httpx()
        request = client.build_request(
            "POST", self.endpoint, json=dict(body), headers=_build_headers(self._api_key), timeout=timeout
        )
        try:
            response = client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise to_transport_error(e, self.endpoint) from e
        if response.is_error:
            try:
                response.read()
            finally:
                response.close()
            err = _status_error(response, self.endpoint)
            log_event(self._logger, "transport.status_error", LogContext(endpoint=self.endpoint),
                      status_code=err.status_code, error_code=err.code.value)
            raise err
        return ResponseStream(response, self.endpoint)


class AsyncHttpStreamTransport:
    """Open streaming chat completions over ``httpx.AsyncClient``.

    Without an injected client the transport owns one, created on first use
    and released by :meth:`aclose` (or ``async with``).
    """

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeouts: Optional[TimeoutConfig] = None,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    ) -> None:
        self.endpoint = endpoint
        self._api_key = api_key
        self._client = client
        self._owns_client = client is None
        self._timeouts = timeouts
        self._retry_config = retry_config
        self._logger = get_logger("sse_chat.transport")

    async def open(self, body: Mapping[str, Any]) -> AsyncResponseStream:
        """Async twin of :meth:`HttpStreamTransport.open`."""
        return await async_retry(self._retry_config)(self._open_once)(body)

    async def _open_once(self, body: Mapping[str, Any]) -> AsyncResponseStream:
        timeout = (self._timeouts or get_timeout_config()).to_httpx()
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=timeout)
        request = self._client.build_request(
            "POST", self.endpoint, json=dict(body), headers=_build_headers(self._api_key), timeout=timeout
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise to_transport_error(e, self.endpoint) from e
        if response.is_error:
            try:
                await response.aread()
            finally:
                await response.aclose()
            err = _status_error(response, self.endpoint)
            log_event(self._logger, "transport.status_error", LogContext(endpoint=self.endpoint),
                      status_code=err.status_code, error_code=err.code.value)
            raise err
        return AsyncResponseStream(response, self.endpoint)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncHttpStreamTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = [
    "HttpStreamTransport",
    "AsyncHttpStreamTransport",
    "ResponseStream",
    "AsyncResponseStream",
]
