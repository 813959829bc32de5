"""
FastAPI app serving a deterministic streaming chat endpoint.

Purpose
-------
Give the client, the CLI and the tests a local peer speaking the same wire
format as the hosted chat function: ``text/event-stream`` with ``data: ``
lines carrying ``choices[0].delta.content`` chunks, ``:`` keep-alive
comments and a final ``data: [DONE]``.

Behavior
--------
The reply echoes the last user message, split into word-sized fragments.
The request body is validated as :class:`ChatRequestDTO`; invalid bodies are
rejected with HTTP 422 by FastAPI before any streaming starts.
"""
from __future__ import annotations

import json
import re
import time
import uuid
from typing import Any, Dict, Iterator

from fastapi import FastAPI
from fastapi.responses import StreamingResponse

from ..base.constants import DATA_PREFIX, DONE_SENTINEL
from ..base.dto import ChatRequestDTO
from ..config.defaults import CHAT_FUNCTION_PATH

ECHO_MODEL = "sse-chat-echo"
KEEP_ALIVE = ": keep-alive\n\n"

app = FastAPI(title="sse_chat dev server")


def format_sse_data(payload: Any) -> str:
    """Frame ``payload`` as one SSE data event (JSON unless already a string)."""
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"{DATA_PREFIX}{data}\n\n"


def _chunk(completion_id: str, created: int, delta: Dict[str, Any], finish_reason: str | None = None) -> Dict[str, Any]:
    return {
        "id": completion_id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": ECHO_MODEL,
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


def split_fragments(text: str) -> list[str]:
    """Split ``text`` into word-sized fragments that concatenate back to it."""
    return re.findall(r"\s*\S+\s*", text) or ([text] if text else [])


def iter_echo_events(reply: str) -> Iterator[str]:
    """Yield the SSE events streaming ``reply``."""
    completion_id = f"chatcmpl-{uuid.uuid4().hex[:12]}"
    created = int(time.time())
    yield KEEP_ALIVE
    yield format_sse_data(_chunk(completion_id, created, {"role": "assistant"}))
    for idx, fragment in enumerate(split_fragments(reply)):
        if idx and idx % 8 == 0:
            yield KEEP_ALIVE
        yield format_sse_data(_chunk(completion_id, created, {"content": fragment}))
    yield format_sse_data(_chunk(completion_id, created, {}, finish_reason="stop"))
    yield format_sse_data(DONE_SENTINEL)


@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


@app.post(CHAT_FUNCTION_PATH)
def post_chat(body: ChatRequestDTO) -> StreamingResponse:
    """Stream an echo of the last user message as chat completion chunks."""
    reply = f"You said: {body.messages[-1].content}"
    return StreamingResponse(iter_echo_events(reply), media_type="text/event-stream")


__all__ = ["app", "iter_echo_events", "format_sse_data", "split_fragments"]
