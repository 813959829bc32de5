"""Events produced by stream controllers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .session import SessionState


@dataclass
class TranscriptEvent:
    """One observer notification, or the terminal event of a session.

    Fields:
      fragment: text appended by this step (empty for no-op payloads)
      transcript: full transcript after this step
      finish: True on the single terminal event
      state: final session state (terminal event only)
      error: error string (failed sessions only)
    """

    fragment: str
    transcript: str
    finish: bool = False
    state: Optional[SessionState] = None
    error: Optional[str] = None


def final_transcript(events: Iterable[TranscriptEvent]) -> str:
    """Return the transcript carried by the last event (``""`` when empty)."""
    transcript = ""
    for evt in events:
        transcript = evt.transcript
    return transcript


__all__ = ["TranscriptEvent", "final_transcript"]
