"""Per-request stream session state."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..decoding.line_framer import LineFramer
from ..errors import TransportError


class SessionState(str, Enum):
    """Lifecycle of one stream session."""

    IDLE = "idle"
    READING = "reading"
    DRAINING = "draining"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


FINAL_STATES = frozenset({SessionState.COMPLETED, SessionState.FAILED, SessionState.CANCELLED})


@dataclass
class StreamSession:
    """State owned by one controller for one outbound request.

    Attributes:
        transcript: Concatenation of every fragment so far; append-only.
        framer: Holds the carry-over buffer between chunks.
        state: Current :class:`SessionState`.
        saw_sentinel: Whether ``[DONE]`` was received.
        error: The transport failure that ended the session, if any.
    """

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    transcript: str = ""
    framer: LineFramer = field(default_factory=LineFramer, repr=False)
    state: SessionState = SessionState.IDLE
    saw_sentinel: bool = False
    error: Optional[TransportError] = None

    @property
    def carry_over(self) -> str:
        return self.framer.pending

    @property
    def terminated(self) -> bool:
        """True once the session reached a final state."""
        return self.state in FINAL_STATES

    def begin(self, state: SessionState) -> None:
        """Move between non-final states."""
        if self.terminated:
            raise RuntimeError(f"session {self.session_id} already {self.state.value}")
        self.state = state

    def terminate(self, state: SessionState, error: Optional[TransportError] = None) -> None:
        """Enter a final state; allowed exactly once."""
        if state not in FINAL_STATES:
            raise ValueError(f"{state.value} is not a final state")
        if self.terminated:
            raise RuntimeError(f"session {self.session_id} already {self.state.value}")
        self.state = state
        self.error = error


__all__ = ["SessionState", "StreamSession", "FINAL_STATES"]
