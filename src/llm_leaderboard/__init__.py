"""
LLM Leaderboard - Core Package

A backend for evaluating LLM providers and models against datasets.

This package provides:
- Provider abstraction layer and connection checks for LLM APIs
- Service layer for inference execution, scoring and import/export
- Database layer for providers, datasets, inferences and metrics
- FastAPI application exposing all of it over HTTP (``llm_leaderboard.api``)
"""

__version__ = "0.1.0"

# Import from subpackages to make them discoverable
from .providers import BaseLLMProvider, ProviderResponse

from . import db
from . import services
from . import utils

__all__ = [
    "BaseLLMProvider",
    "ProviderResponse",
    "db",
    "services",
    "utils",
]
