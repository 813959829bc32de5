"""DTO validation package for outbound chat requests."""

from .chat import ChatMessageDTO, ChatRequestDTO, Role

__all__ = ["Role", "ChatMessageDTO", "ChatRequestDTO"]
