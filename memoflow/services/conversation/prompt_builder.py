from __future__ import annotations

import json
from typing import Any

from ...models.memory import MemorySnapshot


def _format_profile(profile: Any) -> str:
    return json.dumps(profile, ensure_ascii=False, separators=(",", ":"))


def format_turn(user_message: str, answer: str) -> str:
    """Render one exchange the way it is stored in history."""

    return f"User: {user_message}\nAssistant: {answer}"


def build_chat_prompt(snapshot: MemorySnapshot, user_message: str) -> str:
    profile_line = ""
    if snapshot.profile is not None:
        profile_line = f"User profile: {_format_profile(snapshot.profile)}\n"
    history = "\n".join(snapshot.history)
    return f"{profile_line}Conversation so far:\n{history}\nUser: {user_message}\nAssistant:"


__all__ = ["build_chat_prompt", "format_turn"]
