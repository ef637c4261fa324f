"""Single-prompt text generation on top of the chat-completions client."""

from __future__ import annotations

from typing import Optional

from ..config import get_settings
from ..errors import InferenceError
from ..llm_client import LLMError, request_chat_completion
from ..logging_config import logger


async def generate(prompt: str, *, model: Optional[str] = None, system: Optional[str] = None) -> str:
    """Send *prompt* as a single user turn and return the model's text answer."""

    settings = get_settings()
    chosen_model = model or settings.chat_model
    try:
        response = await request_chat_completion(
            model=chosen_model,
            messages=[{"role": "user", "content": prompt}],
            system=system,
        )
    except LLMError as exc:
        logger.error("inference request failed", extra={"model": chosen_model, "error": str(exc)})
        raise InferenceError(str(exc), context={"model": chosen_model}) from exc

    choices = response.get("choices") if isinstance(response, dict) else None
    if not isinstance(choices, list) or not choices:
        raise InferenceError("LLM response missing choices", context={"model": chosen_model})
    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    content = content.strip() if isinstance(content, str) else ""
    if not content:
        raise InferenceError("LLM response missing content", context={"model": chosen_model})
    return content


__all__ = ["generate"]
