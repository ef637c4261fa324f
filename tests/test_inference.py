"""
Text generation over the chat-completions client: successful answers and the
mapping of malformed or failed responses onto InferenceError.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from memoflow.errors import InferenceError
from memoflow.services.inference import generate

_RealAsyncClient = httpx.AsyncClient


def _serving(handler):
    """Make the LLM client talk to *handler* instead of the network."""

    def factory(*args, **kwargs):
        return _RealAsyncClient(transport=httpx.MockTransport(handler))

    return patch("memoflow.llm_client.client.httpx.AsyncClient", factory)


def test_generate_returns_first_choice_content():
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Hello!  "}}]})

    with _serving(handler):
        assert asyncio.run(generate("hi")) == "Hello!"


@pytest.mark.parametrize(
    "body",
    [
        ["rate limited"],
        "rate limited",
        42,
        {"error": "rate limited"},
        None,
    ],
)
def test_error_response_of_any_json_shape_is_inference_error(body):
    def handler(request):
        return httpx.Response(429, json=body)

    with _serving(handler):
        with pytest.raises(InferenceError, match="429"):
            asyncio.run(generate("hi"))


def test_error_response_with_plain_text_body_is_inference_error():
    with _serving(lambda request: httpx.Response(503, text="upstream overloaded")):
        with pytest.raises(InferenceError, match="upstream overloaded"):
            asyncio.run(generate("hi"))


@pytest.mark.parametrize(
    "payload",
    [
        ["not", "an", "object"],
        {"choices": "nope"},
        {"choices": []},
        {"choices": ["text only"]},
        {"choices": [{"message": "text only"}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": "   "}}]},
    ],
)
def test_malformed_success_payload_is_inference_error(payload):
    with patch("memoflow.services.inference.request_chat_completion", AsyncMock(return_value=payload)):
        with pytest.raises(InferenceError):
            asyncio.run(generate("hi"))
