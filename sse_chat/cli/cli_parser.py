"""CLI parser construction for ``sse-chat``.

Wires argument shapes only; execution lives in ``cli_shell``.
"""

from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser.

    Without a prompt the CLI opens an interactive shell; with one it sends a
    single message and exits.
    """
    p = argparse.ArgumentParser(prog="sse-chat", description="Stream chat replies from an SSE chat endpoint")
    p.add_argument("prompt", nargs="?", default=None, help="send one message and exit")
    p.add_argument("--endpoint", default=None, help="chat endpoint URL (default: SSE_CHAT_ENDPOINT or dev server)")
    p.add_argument("--api-key", default=None, help="bearer token (default: SSE_CHAT_API_KEY)")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    p.add_argument("--plain-logs", action="store_true", help="human-readable logs instead of JSON")
    return p


__all__ = ["build_parser"]
