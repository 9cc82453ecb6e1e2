"""
Presence and type validation for form data.

Repositories call these before writing. Each validator collects every problem
and raises a single ``ValidationError`` whose message joins them.
"""

from typing import Any, Mapping

from .constants import DATASET_TYPES, PROVIDER_TYPES
from .exceptions import ValidationError
from .utils.text_utils import is_blank

# type -> (endpoint required, api_key required)
PROVIDER_FIELD_REQUIREMENTS = {
    "azure": (True, True),
    "ollama": (True, False),
    "openai": (False, True),
    "huggingface": (False, True),
    "custom": (True, False),
}


def _require(data: Mapping[str, Any], errors: list[str], *fields: str) -> None:
    for name in fields:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            errors.append(f"{name} must be a string")
        elif is_blank(value):
            errors.append(f"{name} is required")


def _check_text(data: Mapping[str, Any], errors: list[str], *fields: str) -> None:
    for name in fields:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            errors.append(f"{name} must be a string")


def _check_map(data: Mapping[str, Any], errors: list[str], name: str) -> None:
    value = data.get(name)
    if value is not None and not isinstance(value, Mapping):
        errors.append(f"{name} must be an object")


def validate_provider(data: Mapping[str, Any]) -> None:
    errors: list[str] = []
    _require(data, errors, "name")

    provider_type = data.get("type")
    if provider_type not in PROVIDER_FIELD_REQUIREMENTS:
        errors.append(f"type must be one of: {', '.join(PROVIDER_TYPES)}")
    else:
        endpoint_required, api_key_required = PROVIDER_FIELD_REQUIREMENTS[provider_type]
        if endpoint_required and is_blank(data.get("endpoint")):
            errors.append(f"endpoint is required for {provider_type} providers")
        if api_key_required and is_blank(data.get("api_key")):
            errors.append(f"api_key is required for {provider_type} providers")

    if errors:
        raise ValidationError(errors)


def validate_model(data: Mapping[str, Any]) -> None:
    errors: list[str] = []
    _require(data, errors, "provider_id", "name", "display_name")
    _check_map(data, errors, "parameters")
    if errors:
        raise ValidationError(errors)


def validate_dataset(data: Mapping[str, Any]) -> None:
    errors: list[str] = []
    _require(data, errors, "name")
    _check_text(data, errors, "description")
    if data.get("type") not in DATASET_TYPES:
        errors.append(f"type must be one of: {', '.join(DATASET_TYPES)}")
    if errors:
        raise ValidationError(errors)


def validate_dataset_item(data: Mapping[str, Any]) -> None:
    errors: list[str] = []
    _require(data, errors, "input")
    _check_text(data, errors, "expected_output")
    _check_map(data, errors, "metadata")
    if errors:
        raise ValidationError(errors)


def validate_inference(data: Mapping[str, Any]) -> None:
    errors: list[str] = []
    _require(data, errors, "name", "dataset_id", "provider_id", "model_id")
    if errors:
        raise ValidationError(errors)


def validate_metric(data: Mapping[str, Any]) -> None:
    errors: list[str] = []
    _require(data, errors, "name", "type")
    _check_map(data, errors, "parameters")
    if errors:
        raise ValidationError(errors)
