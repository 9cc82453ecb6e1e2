"""
Tests for form validation and the error types it raises.
"""

import pytest

from llm_leaderboard.exceptions import InvalidTransitionError, LeaderboardError, ValidationError
from llm_leaderboard.validation import (
    validate_dataset, validate_dataset_item, validate_inference, validate_model,
    validate_provider,
)


def test_validation_error_collects_messages():
    with pytest.raises(ValidationError) as exc_info:
        validate_inference({"name": " "})

    assert exc_info.value.errors == [
        "name is required",
        "dataset_id is required",
        "provider_id is required",
        "model_id is required",
    ]
    assert str(exc_info.value).startswith("name is required; dataset_id is required")


def test_validation_error_is_value_error():
    assert issubclass(ValidationError, ValueError)
    assert issubclass(ValidationError, LeaderboardError)
    assert ValidationError("bad").errors == ["bad"]


@pytest.mark.parametrize(
    "data",
    [
        {"name": "Azure", "type": "azure", "endpoint": "https://x", "api_key": "k"},
        {"name": "Ollama", "type": "ollama", "endpoint": "http://localhost:11434"},
        {"name": "OpenAI", "type": "openai", "api_key": "sk"},
        {"name": "HF", "type": "huggingface", "api_key": "hf"},
        {"name": "vLLM", "type": "custom", "endpoint": "http://vllm:8000/v1"},
    ],
)
def test_valid_providers(data):
    validate_provider(data)


def test_azure_reports_both_missing_fields():
    with pytest.raises(ValidationError) as exc_info:
        validate_provider({"name": "Azure", "type": "azure"})
    assert exc_info.value.errors == [
        "endpoint is required for azure providers",
        "api_key is required for azure providers",
    ]


def test_model_requires_display_name():
    with pytest.raises(ValidationError, match="display_name is required"):
        validate_model({"provider_id": "p", "name": "m"})


def test_item_accepts_missing_expected_output():
    validate_dataset_item({"input": "question"})


def test_invalid_transition_message():
    error = InvalidTransitionError("abc", "completed", "run")
    assert str(error) == "Cannot run inference abc: status is 'completed'"
    assert isinstance(error, LeaderboardError)


def test_non_string_text_fields_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_dataset({"name": 123, "description": ["x"], "type": "qa"})
    assert exc_info.value.errors == ["name must be a string", "description must be a string"]

    with pytest.raises(ValidationError, match="expected_output must be a string"):
        validate_dataset_item({"input": "q", "expected_output": 7})
