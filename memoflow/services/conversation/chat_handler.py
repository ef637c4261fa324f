"""Answer a chat message using the caller's stored memory as context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ...errors import BadRequest, StorageUnavailable
from ...logging_config import logger
from ...models.memory import MemorySnapshot
from ..inference import generate
from ..memory import MemoryActorStub, MemoryNamespace, get_memory_namespace
from .prompt_builder import build_chat_prompt, format_turn

Generate = Callable[[str], Awaitable[str]]

PERSIST_WARNING = "reply was not saved to memory"


@dataclass
class ChatResult:
    answer: str
    warning: Optional[str] = None


async def _load_memory(stub: MemoryActorStub) -> MemorySnapshot:
    try:
        return await stub.get()
    except StorageUnavailable as exc:
        logger.warning(
            "memory read failed; continuing without history",
            extra={"user_id": stub.user_id, "error": str(exc)},
        )
        return MemorySnapshot.empty()


async def converse(
    user_id: str,
    user_message: str,
    *,
    namespace: Optional[MemoryNamespace] = None,
    generate_fn: Optional[Generate] = None,
) -> ChatResult:
    """Run one chat turn: read memory, ask the model, then record the turn.

    Inference failures propagate as ``InferenceError`` before memory is
    touched. A failed append is logged and reported through ``warning`` while
    the answer is still returned.
    """

    if not isinstance(user_message, str) or not user_message.strip():
        raise BadRequest("userMsg must be a non-empty string", context={"user_id": user_id})

    if namespace is None:
        namespace = get_memory_namespace()
    stub = namespace.get(user_id)
    snapshot = await _load_memory(stub)

    prompt = build_chat_prompt(snapshot, user_message)
    logger.info(
        "chat request",
        extra={"user_id": user_id, "history_turns": len(snapshot.history), "message_length": len(user_message)},
    )

    answer = await (generate_fn or generate)(prompt)

    try:
        await stub.append(format_turn(user_message, answer))
    except StorageUnavailable as exc:
        logger.warning(
            "chat turn not persisted",
            extra={"user_id": user_id, "operation": exc.operation, "error": str(exc)},
        )
        return ChatResult(answer=answer, warning=PERSIST_WARNING)

    return ChatResult(answer=answer)


__all__ = ["ChatResult", "PERSIST_WARNING", "converse"]
