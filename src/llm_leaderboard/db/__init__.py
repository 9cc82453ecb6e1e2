"""
Database Layer - Models, connections, and repositories.

This package provides persistence for providers, models, datasets,
inferences and metrics using SQLAlchemy. SQLite is the default store.
"""

from .models import (
    Base,
    Provider,
    Model,
    Dataset,
    DatasetItem,
    Inference,
    InferenceResult,
    Metric,
    PROVIDER_TYPES,
    DATASET_TYPES,
    INFERENCE_STATUSES,
)
from .connection import DatabaseConnection
from .provider_repository import ProviderRepository
from .dataset_repository import DatasetRepository
from .inference_repository import InferenceRepository
from .metric_repository import MetricRepository

__all__ = [
    "Base",
    "Provider",
    "Model",
    "Dataset",
    "DatasetItem",
    "Inference",
    "InferenceResult",
    "Metric",
    "PROVIDER_TYPES",
    "DATASET_TYPES",
    "INFERENCE_STATUSES",
    "DatabaseConnection",
    "ProviderRepository",
    "DatasetRepository",
    "InferenceRepository",
    "MetricRepository",
]
