"""Outbound request DTO validation."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from sse_chat.base.dto import ChatMessageDTO, ChatRequestDTO


def test_body_shape():
    req = ChatRequestDTO(
        messages=[
            ChatMessageDTO(role="user", content="hi"),
            ChatMessageDTO(role="assistant", content="hello"),
            {"role": "user", "content": "again"},
        ]
    )
    assert req.to_body() == {  # nosec B101
        "messages": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "again"},
        ]
    }


@pytest.mark.parametrize(
    "messages",
    [
        [],
        [{"role": "assistant", "content": "hello"}],
        [{"role": "user", "content": "   "}],
        [{"role": "robot", "content": "beep"}],
    ],
)
def test_invalid_requests(messages):
    with pytest.raises(ValidationError):
        ChatRequestDTO(messages=messages)


def test_messages_are_immutable():
    msg = ChatMessageDTO(role="user", content="hi")
    with pytest.raises(ValidationError):
        msg.content = "changed"
