"""
Service Layer - inference execution, scoring and dataset/result transfer.
"""

from .executors import (
    ExecutionItem,
    ExecutionRequest,
    InferenceExecutor,
    ItemOutcome,
    ProviderInferenceExecutor,
)
from .inference_runner import InferenceRunner, STOPPED_MESSAGE
from .scoring import SCORERS, MetricSpec, aggregate, score_result
from .dataset_transfer import export_dataset_json, import_dataset, parse_import_document
from .result_export import results_to_csv

__all__ = [
    "ExecutionItem",
    "ExecutionRequest",
    "InferenceExecutor",
    "ItemOutcome",
    "ProviderInferenceExecutor",
    "InferenceRunner",
    "STOPPED_MESSAGE",
    "SCORERS",
    "MetricSpec",
    "aggregate",
    "score_result",
    "export_dataset_json",
    "import_dataset",
    "parse_import_document",
    "results_to_csv",
]
