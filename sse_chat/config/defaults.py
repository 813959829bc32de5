"""Built-in configuration defaults."""
from __future__ import annotations

from ..base.constants import DEFAULT_MALFORMED_RETRY_LIMIT

# Path of the chat function relative to the backend base URL
CHAT_FUNCTION_PATH = "/functions/v1/chat"

DEV_SERVER_HOST = "127.0.0.1"
DEV_SERVER_PORT = 8787
DEV_SERVER_ENDPOINT = f"http://{DEV_SERVER_HOST}:{DEV_SERVER_PORT}{CHAT_FUNCTION_PATH}"

DEFAULTS = {
    "endpoint": DEV_SERVER_ENDPOINT,
    "api_key": None,
    "malformed_retry_limit": DEFAULT_MALFORMED_RETRY_LIMIT,
    "start_attempts": 3,
}

__all__ = [
    "CHAT_FUNCTION_PATH",
    "DEV_SERVER_HOST",
    "DEV_SERVER_PORT",
    "DEV_SERVER_ENDPOINT",
    "DEFAULTS",
]
