"""Conversation-related service helpers."""

from .chat_handler import PERSIST_WARNING, ChatResult, converse
from .prompt_builder import build_chat_prompt, format_turn

__all__ = [
    "ChatResult",
    "PERSIST_WARNING",
    "build_chat_prompt",
    "converse",
    "format_turn",
]
