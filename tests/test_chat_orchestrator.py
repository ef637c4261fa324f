"""
Chat turns: prompt construction from memory, persistence of the new turn and
the failure paths around inference and storage.
"""

import asyncio
import sqlite3
import time
from unittest.mock import AsyncMock, patch

import pytest

from memoflow.errors import BadRequest, InferenceError
from memoflow.models import MemorySnapshot
from memoflow.services.conversation import PERSIST_WARNING, build_chat_prompt, converse, format_turn
from memoflow.services.memory import MemoryNamespace


def test_first_turn_prompt_has_no_profile_or_history(namespace, recorder):
    generate = recorder("Hi there!")

    result = asyncio.run(converse("u1", "hello", namespace=namespace, generate_fn=generate))

    prompt = generate.prompts[0]
    assert result.answer == "Hi there!"
    assert result.warning is None
    assert "User profile" not in prompt
    assert prompt == "Conversation so far:\n\nUser: hello\nAssistant:"
    assert prompt.endswith("User: hello\nAssistant:")

    history = asyncio.run(namespace.get("u1").get()).history
    assert history == ["User: hello\nAssistant: Hi there!"]


def test_second_turn_includes_prior_turn_in_order(namespace, recorder):
    generate = recorder("Hi there!", "Doing well.")

    async def scenario():
        await converse("u1", "hello", namespace=namespace, generate_fn=generate)
        await converse("u1", "how are you", namespace=namespace, generate_fn=generate)

    asyncio.run(scenario())

    second_prompt = generate.prompts[1]
    assert second_prompt == (
        "Conversation so far:\n"
        "User: hello\nAssistant: Hi there!\n"
        "User: how are you\nAssistant:"
    )
    history = asyncio.run(namespace.get("u1").get()).history
    assert history == [
        "User: hello\nAssistant: Hi there!",
        "User: how are you\nAssistant: Doing well.",
    ]


def test_profile_line_is_rendered_when_present(namespace, recorder):
    generate = recorder("Bonjour")
    asyncio.run(namespace.get("u1").set_profile({"language": "fr"}))

    asyncio.run(converse("u1", "salut", namespace=namespace, generate_fn=generate))

    assert generate.prompts[0].startswith('User profile: {"language":"fr"}\nConversation so far:\n')


def test_prompt_builder_joins_history_one_turn_per_line():
    snapshot = MemorySnapshot(history=["User: a\nAssistant: b", "User: c\nAssistant: d"])

    prompt = build_chat_prompt(snapshot, "e")

    assert prompt == "Conversation so far:\nUser: a\nAssistant: b\nUser: c\nAssistant: d\nUser: e\nAssistant:"
    assert format_turn("e", "f") == "User: e\nAssistant: f"


def test_inference_failure_aborts_without_touching_memory(namespace):
    failing = AsyncMock(side_effect=InferenceError("model offline"))

    with pytest.raises(InferenceError):
        asyncio.run(converse("u1", "hello", namespace=namespace, generate_fn=failing))

    assert asyncio.run(namespace.get("u1").get()).history == []


def test_persist_failure_still_returns_answer_with_warning(namespace, actor_store, recorder):
    generate = recorder("still here")

    with patch.object(actor_store, "append", side_effect=sqlite3.OperationalError("read-only")):
        result = asyncio.run(converse("u1", "hello", namespace=namespace, generate_fn=generate))

    assert result.answer == "still here"
    assert result.warning == PERSIST_WARNING


def test_memory_read_failure_degrades_to_empty_context(namespace, actor_store, recorder):
    generate = recorder("fresh start")
    asyncio.run(namespace.get("u1").append("User: old\nAssistant: older"))

    with patch.object(actor_store, "load", side_effect=sqlite3.OperationalError("locked")):
        result = asyncio.run(converse("u1", "hello", namespace=namespace, generate_fn=generate))

    assert result.answer == "fresh start"
    assert "old" not in generate.prompts[0]
    assert asyncio.run(namespace.get("u1").get()).history[-1] == "User: hello\nAssistant: fresh start"


@pytest.mark.parametrize("message", ["", "   "])
def test_blank_message_is_rejected_before_inference(namespace, message):
    generate = AsyncMock(return_value="unused")

    with pytest.raises(BadRequest):
        asyncio.run(converse("u1", message, namespace=namespace, generate_fn=generate))

    generate.assert_not_called()


def test_slow_but_successful_save_carries_no_warning(actor_store, recorder):
    namespace = MemoryNamespace(actor_store, store_timeout=0.05)
    generate = recorder("yo")
    original = actor_store.append

    def slow_append(actor_id, item):
        time.sleep(0.2)
        return original(actor_id, item)

    with patch.object(actor_store, "append", side_effect=slow_append):
        result = asyncio.run(converse("u2", "hi", namespace=namespace, generate_fn=generate))

    assert result.answer == "yo"
    assert result.warning is None
    assert asyncio.run(namespace.get("u2").get()).history == ["User: hi\nAssistant: yo"]
