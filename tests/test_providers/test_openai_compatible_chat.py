"""
Tests for OpenAICompatibleChatProvider with the SDK client mocked out.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from llm_leaderboard.exceptions import ProviderCallError
from llm_leaderboard.providers.base import ProviderResponse
from llm_leaderboard.providers.openai_compatible_chat_provider import (
    OpenAICompatibleChatProvider,
)

CLIENT_PATH = "llm_leaderboard.providers.openai_compatible_chat_provider.AsyncOpenAI"


def _reply(content="Paris", usage=True):
    choice = MagicMock()
    choice.message.content = content
    choice.finish_reason = "stop"
    reply = MagicMock()
    reply.choices = [choice]
    reply.usage = (
        MagicMock(total_tokens=42, prompt_tokens=10, completion_tokens=32) if usage else None
    )
    return reply


@pytest.fixture
def ollama():
    """An Ollama-backed client whose SDK returns ``_reply()`` by default."""
    with patch(CLIENT_PATH) as MockClient:
        sdk = AsyncMock()
        sdk.chat.completions.create = AsyncMock(return_value=_reply())
        MockClient.return_value = sdk
        client = OpenAICompatibleChatProvider(
            base_url="http://localhost:11434/v1",
            model="llama3.1:8b",
            provider_label="ollama_llama3.1:8b",
        )
        client.sdk = sdk
        yield client


def _sent(client):
    return client.sdk.chat.completions.create.call_args.kwargs


@pytest.mark.asyncio
async def test_answer_with_usage(ollama):
    result = await ollama.complete("Capital of France?", temperature=0.0, max_tokens=16)

    assert isinstance(result, ProviderResponse)
    assert (result.text, result.provider, result.tokens) == ("Paris", "ollama_llama3.1:8b", 42)
    assert result.latency_ms >= 0
    assert result.metadata == {
        "model": "llama3.1:8b",
        "finish_reason": "stop",
        "prompt_tokens": 10,
        "completion_tokens": 32,
        "temperature": 0.0,
        "max_tokens": 16,
    }


@pytest.mark.asyncio
async def test_request_shape(ollama):
    await ollama.complete("Capital of France?", top_p=0.5)

    assert _sent(ollama) == {
        "model": "llama3.1:8b",
        "messages": [{"role": "user", "content": "Capital of France?"}],
        "temperature": 0.7,
        "top_p": 0.5,
    }


@pytest.mark.asyncio
async def test_missing_usage_and_content(ollama):
    ollama.sdk.chat.completions.create.return_value = _reply(content=None, usage=False)

    result = await ollama.complete("prompt")

    assert result.text == ""
    assert result.tokens is None
    assert result.metadata["prompt_tokens"] is None


@pytest.mark.asyncio
async def test_backend_failure_raises_provider_call_error(ollama):
    ollama.sdk.chat.completions.create.side_effect = ConnectionError("connection refused")

    with pytest.raises(ProviderCallError, match="OpenAI-compatible API call failed: connection refused"):
        await ollama.complete("prompt")


@pytest.mark.asyncio
async def test_context_manager_closes_sdk_client(ollama):
    async with ollama:
        pass

    ollama.sdk.close.assert_awaited_once()


@pytest.mark.parametrize("base_url", [None, "https://router.huggingface.co/v1"])
def test_sdk_client_configuration(base_url):
    with patch(CLIENT_PATH) as MockClient:
        client = OpenAICompatibleChatProvider(base_url=base_url, model="m", api_key="hf_x")

    MockClient.assert_called_once_with(base_url=base_url, api_key="hf_x")
    assert client.get_provider_name() == "openai_compatible"
