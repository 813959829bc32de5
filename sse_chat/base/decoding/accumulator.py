"""Append fragments to a session transcript."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..streaming.session import StreamSession


def accumulate(session: "StreamSession", fragment: str) -> str:
    """Append ``fragment`` to ``session.transcript`` and return the new transcript.

    An empty fragment leaves the transcript unchanged but is still reported,
    so observers can be notified uniformly.
    """
    if fragment:
        session.transcript += fragment
    return session.transcript


__all__ = ["accumulate"]
