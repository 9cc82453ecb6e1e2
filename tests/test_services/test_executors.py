"""
Tests for ProviderInferenceExecutor with a mock LLM client.
"""

from unittest.mock import MagicMock

import pytest

from llm_leaderboard.services.executors import (
    ExecutionItem, ExecutionRequest, ProviderInferenceExecutor,
)


def _request(parameters=None):
    return ExecutionRequest(
        inference_id="inf-1",
        provider={"type": "ollama", "endpoint": "http://localhost:11434"},
        model={"name": "llama3", "parameters": parameters},
        items=[
            ExecutionItem("item-1", "Capital of France?", "Paris"),
            ExecutionItem("item-2", "Capital of Italy?", "Rome"),
        ],
    )


def _executor(client):
    factory = MagicMock()
    factory.create.return_value = client
    return ProviderInferenceExecutor(factory), factory


async def _collect(executor, request):
    return [outcome async for outcome in executor.execute(request)]


@pytest.mark.asyncio
async def test_yields_outcome_per_item(mock_provider):
    executor, factory = _executor(mock_provider)
    request = _request()

    outcomes = await _collect(executor, request)

    factory.create.assert_called_once_with(request.provider, request.model)
    assert [o.dataset_item_id for o in outcomes] == ["item-1", "item-2"]
    assert outcomes[0].actual_output == "Mock response to: 'Capital of France?'"
    assert outcomes[0].latency_ms == 50.0
    assert outcomes[0].token_count > 0
    assert outcomes[0].error is None
    assert outcomes[0].metadata["model"] == "mock-model-v1"
    assert mock_provider.closed is True


@pytest.mark.asyncio
async def test_forwards_completion_parameters(mock_provider):
    executor, _ = _executor(mock_provider)

    outcomes = await _collect(
        executor, _request({"temperature": 0.0, "deployment_name": "ignored"})
    )

    assert outcomes[0].metadata["temperature"] == 0.0


@pytest.mark.asyncio
async def test_item_failure_becomes_error_outcome(mock_provider):
    calls = []

    async def flaky(prompt, **kwargs):
        calls.append(prompt)
        if len(calls) == 1:
            raise TimeoutError("request timed out")
        return await type(mock_provider).complete(mock_provider, prompt, **kwargs)

    mock_provider.complete = flaky
    executor, _ = _executor(mock_provider)

    outcomes = await _collect(executor, _request())

    assert outcomes[0].error == "request timed out"
    assert outcomes[0].actual_output == ""
    assert outcomes[1].error is None
    assert mock_provider.closed is True


@pytest.mark.asyncio
async def test_client_closed_when_consumer_stops_early(mock_provider):
    executor, _ = _executor(mock_provider)

    stream = executor.execute(_request())
    first = await stream.__anext__()
    await stream.aclose()

    assert first.dataset_item_id == "item-1"
    assert mock_provider.closed is True
