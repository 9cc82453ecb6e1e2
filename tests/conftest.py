"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from llm_leaderboard.api.app import create_app
from llm_leaderboard.config import ApiConfig
from llm_leaderboard.db.connection import DatabaseConnection
from llm_leaderboard.db.dataset_repository import DatasetRepository
from llm_leaderboard.db.inference_repository import InferenceRepository
from llm_leaderboard.db.provider_repository import ProviderRepository
from llm_leaderboard.providers.base import BaseLLMProvider, ProviderResponse
from llm_leaderboard.services.executors import InferenceExecutor, ItemOutcome
from llm_leaderboard.services.inference_runner import InferenceRunner


@pytest.fixture
def db_connection():
    """Fixture for in-memory SQLite database."""
    db = DatabaseConnection("sqlite:///:memory:")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def seeded(db_connection):
    """
    Fixture that stores one Ollama provider with one model and a QA dataset
    of three items, plus a pending inference over them.

    Returns a dict of ids.
    """
    with db_connection.session_scope() as session:
        providers = ProviderRepository(session)
        provider = providers.create_provider({
            "name": "Local Ollama", "type": "ollama", "endpoint": "http://localhost:11434",
        })
        model = providers.create_model({
            "provider_id": provider.id, "name": "llama3.1:8b", "display_name": "Llama 3.1 8B",
            "parameters": {"temperature": 0.0},
        })

        datasets = DatasetRepository(session)
        dataset = datasets.create_dataset({"name": "Capitals", "type": "qa"})
        items = datasets.add_items(dataset.id, [
            {"input": "Capital of France?", "expected_output": "Paris"},
            {"input": "Capital of Italy?", "expected_output": "Rome"},
            {"input": "Capital of Spain?", "expected_output": "Madrid"},
        ])

        inference = InferenceRepository(session).create_inference({
            "name": "baseline", "dataset_id": dataset.id,
            "provider_id": provider.id, "model_id": model.id,
        })
        return {
            "provider_id": provider.id,
            "model_id": model.id,
            "dataset_id": dataset.id,
            "item_ids": [item.id for item in items],
            "inference_id": inference.id,
        }


@pytest.fixture
def mock_provider():
    """
    Fixture for a mock LLM provider.

    Returns a simple mock provider that can be used for testing
    without requiring actual API calls.
    """
    class MockProvider(BaseLLMProvider):
        def __init__(self, name: str = "mock"):
            self.name = name
            self.call_count = 0
            self.closed = False

        async def complete(self, prompt: str, **kwargs) -> ProviderResponse:
            """Simulate an LLM response."""
            self.call_count += 1
            await asyncio.sleep(0)

            response_text = f"Mock response to: '{prompt[:50]}'"
            return ProviderResponse(
                text=response_text,
                provider=self.name,
                tokens=len(prompt.split()) + len(response_text.split()),
                latency_ms=50.0,
                metadata={
                    "model": "mock-model-v1",
                    "temperature": kwargs.get("temperature", 0.7),
                },
            )

        def get_provider_name(self) -> str:
            return self.name

        async def close(self) -> None:
            self.closed = True

    return MockProvider()


@pytest.fixture
def answer_executor():
    """
    Fixture factory for an executor that answers from a lookup table.

    Usage:
        executor = answer_executor({"Capital of France?": "Paris"})

    Inputs missing from the table produce an error outcome. With
    ``raise_after=n`` the executor raises after yielding n outcomes, and
    ``on_item`` is called (with the request and item index) before each
    outcome is yielded.
    """
    class AnswerExecutor(InferenceExecutor):
        def __init__(self, answers=None, raise_after=None, on_item=None):
            self.answers = answers or {}
            self.raise_after = raise_after
            self.on_item = on_item
            self.requests = []

        async def execute(self, request):
            self.requests.append(request)
            for index, item in enumerate(request.items):
                if self.raise_after is not None and index >= self.raise_after:
                    raise RuntimeError("backend unavailable")
                if self.on_item is not None:
                    self.on_item(request, index)
                if item.input in self.answers:
                    yield ItemOutcome(
                        dataset_item_id=item.dataset_item_id,
                        actual_output=self.answers[item.input],
                        latency_ms=10.0 * (index + 1),
                        token_count=5,
                    )
                else:
                    yield ItemOutcome(
                        dataset_item_id=item.dataset_item_id, error="no answer"
                    )

    return AnswerExecutor


@pytest.fixture
def make_client(db_connection, answer_executor):
    """
    Fixture factory for an API test client over the test database.

    Usage:
        with make_client(executor=..., api_token="secret") as client:
            client.get("/health")
    """
    def _make(executor=None, api_token=None):
        runner = InferenceRunner(db_connection, executor or answer_executor())
        app = create_app(
            db=db_connection, runner=runner, api_config=ApiConfig(api_token=api_token)
        )
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client):
    with make_client() as test_client:
        yield test_client
