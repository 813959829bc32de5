"""Conversation-level chat clients."""

from .chat_client import AsyncChatClient, ChatBusyError, ChatClient

__all__ = ["ChatClient", "AsyncChatClient", "ChatBusyError"]
