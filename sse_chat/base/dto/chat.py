"""
Pydantic DTOs for the request body sent to the chat endpoint.

Purpose
-------
Validate the conversation before it leaves the client: the endpoint receives
``{"messages": [{"role": ..., "content": ...}, ...]}`` with the full prior
conversation, oldest first.

Fallback semantics: none. Validation either succeeds or raises
``pydantic.ValidationError``; the chat client lets it propagate because it
signals a programming error, not a transport failure.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Role = Literal["system", "user", "assistant"]


class ChatMessageDTO(BaseModel):
    """One conversation turn.

    Rules:
        - ``role`` must be one of :data:`Role`.
        - ``content`` must contain non-whitespace text.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @field_validator("content")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message content must be non-empty")
        return value


class ChatRequestDTO(BaseModel):
    """Request body for the streaming chat endpoint.

    Raises:
        ValidationError: empty history, blank content, or a conversation that
            does not end with a user turn.
    """

    messages: List[ChatMessageDTO] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _ends_with_user(self) -> "ChatRequestDTO":
        if self.messages[-1].role != "user":
            raise ValueError("last message must be from 'user'")
        return self

    def to_body(self) -> Dict[str, Any]:
        """Return the JSON-ready request body."""
        return self.model_dump(mode="json")


__all__ = ["Role", "ChatMessageDTO", "ChatRequestDTO"]
