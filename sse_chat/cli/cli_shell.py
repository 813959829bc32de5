"""Interactive and one-shot chat sessions for the CLI.

Replies are rendered incrementally: the observer receives the full
transcript, and only the suffix added since the previous notification is
written.
"""

from __future__ import annotations

import sys
from typing import Callable, Optional, TextIO

from ..base.errors import TransportError
from ..client import ChatClient

EXIT_COMMANDS = {"/exit", "/quit"}
RESET_COMMAND = "/reset"


class TranscriptPrinter:
    """Observer writing the new part of each transcript to ``out``."""

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._shown = 0

    def __call__(self, transcript: str) -> None:
        if len(transcript) > self._shown:
            self._out.write(transcript[self._shown:])
            self._out.flush()
            self._shown = len(transcript)


def send_once(
    client: ChatClient, prompt: str, *, out: Optional[TextIO] = None, err: Optional[TextIO] = None
) -> int:
    """Send ``prompt``, stream the reply to ``out`` and return an exit code."""
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        client.send(prompt, TranscriptPrinter(out))
    except TransportError as e:
        out.write("\n")
        err.write(f"error: {e}\n")
        return 1
    out.write("\n")
    return 0


def run_shell(
    client: ChatClient,
    *,
    read: Callable[[str], str] = input,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Read prompts until ``/exit`` or EOF; ``/reset`` clears the conversation.

    Transport errors are reported and the shell keeps running. Returns 0.
    """
    out = out or sys.stdout
    out.write("Type a message. /reset clears the conversation, /exit quits.\n")
    while True:
        try:
            line = read("you> ")
        except (EOFError, KeyboardInterrupt):
            out.write("\n")
            return 0
        command = line.strip()
        if command in EXIT_COMMANDS:
            return 0
        if command == RESET_COMMAND:
            client.reset()
            out.write("(conversation cleared)\n")
            continue
        if not command:
            continue
        out.write("assistant> ")
        send_once(client, line, out=out, err=err)


def run(client: ChatClient, prompt: Optional[str]) -> int:
    return send_once(client, prompt) if prompt is not None else run_shell(client)


__all__ = ["TranscriptPrinter", "send_once", "run_shell", "run"]
