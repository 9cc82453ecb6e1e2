"""
Request/response schemas for the HTTP API.

Fields are snake_case in Python and camelCase on the wire. Response models
validate the repositories' ``to_dict()`` output by field name and serialize
by alias.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ProviderType = Literal["azure", "ollama", "openai", "huggingface", "custom"]
DatasetType = Literal["qa", "summarization", "translation", "classification", "custom"]
InferenceStatus = Literal["pending", "running", "completed", "failed"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    def form(self) -> dict[str, Any]:
        """Return the payload as repository form data (snake_case keys)."""
        return self.model_dump()


# ========== PROVIDERS / MODELS ==========

class ProviderForm(CamelModel):
    name: str
    type: ProviderType
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    is_active: bool = True


class ModelForm(CamelModel):
    provider_id: str
    name: str
    display_name: str
    description: Optional[str] = None
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    is_active: bool = True


class ModelOut(CamelModel):
    id: str
    provider_id: str
    name: str
    display_name: str
    description: Optional[str] = None
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProviderOut(CamelModel):
    id: str
    name: str
    type: str
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    is_active: bool
    created_at: str
    updated_at: str
    models: Optional[List[ModelOut]] = None


class ProviderValidationRequest(CamelModel):
    endpoint: Optional[str] = None
    api_key: Optional[str] = None


class ProviderValidationOut(CamelModel):
    type: str
    valid: bool


# ========== DATASETS ==========

class DatasetForm(CamelModel):
    name: str
    description: Optional[str] = None
    type: DatasetType


class DatasetItemForm(CamelModel):
    input: str
    expected_output: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class DatasetItemOut(CamelModel):
    id: str
    dataset_id: str
    input: str
    expected_output: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DatasetOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    type: str
    item_count: int = 0
    items: Optional[List[DatasetItemOut]] = None
    created_at: str
    updated_at: str


# ========== INFERENCES ==========

class InferenceForm(CamelModel):
    name: str
    description: Optional[str] = None
    dataset_id: str
    provider_id: str
    model_id: str


class InferenceUpdate(CamelModel):
    """Partial update: omitted fields keep their stored values."""
    name: Optional[str] = None
    description: Optional[str] = None
    dataset_id: Optional[str] = None
    provider_id: Optional[str] = None
    model_id: Optional[str] = None


class InferenceResultOut(CamelModel):
    id: str
    inference_id: str
    dataset_item_id: str
    input: str
    expected_output: Optional[str] = None
    actual_output: str
    metrics: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    latency: Optional[float] = None
    token_count: Optional[int] = None
    created_at: Optional[str] = None


class InferenceOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    dataset_id: str
    provider_id: str
    model_id: str
    status: InferenceStatus
    progress: int
    metrics: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: str
    updated_at: str
    completed_at: Optional[str] = None
    results: Optional[List[InferenceResultOut]] = None


# ========== METRICS ==========

class MetricForm(CamelModel):
    name: str
    description: Optional[str] = None
    type: str
    parameters: Optional[Dict[str, Any]] = None
    is_higher_better: bool = True


class MetricOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    type: str
    parameters: Optional[Dict[str, Any]] = None
    is_higher_better: bool
    created_at: str
    updated_at: str
