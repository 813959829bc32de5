from __future__ import annotations

import os

import uvicorn

from ..config.defaults import DEV_SERVER_HOST, DEV_SERVER_PORT


def _parse_port(value: str | None, default: int) -> int:
    """Best-effort parse of a port from string, falling back to ``default``."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def main() -> None:
    """Run the development chat endpoint.

    - SSE_CHAT_DEV_HOST: interface to bind (default "127.0.0.1")
    - SSE_CHAT_DEV_PORT: port to bind (default 8787)
    """
    host = os.getenv("SSE_CHAT_DEV_HOST", DEV_SERVER_HOST)
    port = _parse_port(os.getenv("SSE_CHAT_DEV_PORT"), DEV_SERVER_PORT)
    uvicorn.run("sse_chat.service.app:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
