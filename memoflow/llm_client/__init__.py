from .client import LLMError, request_chat_completion

__all__ = ["LLMError", "request_chat_completion"]
