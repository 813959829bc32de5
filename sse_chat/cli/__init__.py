"""Command line entry point for the streaming chat client.

Usage::

    python -m sse_chat.cli "hello"          # one message
    python -m sse_chat.cli --endpoint URL   # interactive shell
"""

from __future__ import annotations

import os
from typing import Optional, Sequence

from ..base.logging import configure_logger
from ..client import ChatClient
from ..config import get_stream_config
from .cli_parser import build_parser
from .cli_shell import run


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    # Keep stream lifecycle logs out of the way of the rendered reply.
    level = args.log_level or os.getenv("SSE_CHAT_LOG_LEVEL") or "WARNING"
    configure_logger(level=level, json_mode=not args.plain_logs)
    settings = get_stream_config({"endpoint": args.endpoint, "api_key": args.api_key})
    client = ChatClient.from_settings(settings)
    return run(client, args.prompt)


__all__ = ["main"]
