"""
LLM Provider Abstraction Layer

This package provides a unified interface for talking to the LLM backends a
user registers (Azure OpenAI, OpenAI, Ollama, Hugging Face, custom
OpenAI-compatible servers), plus connection checks for each type.

All clients implement the BaseLLMProvider interface and return
standardized ProviderResponse objects.
"""

from .base import BaseLLMProvider, ChatCompletionProvider, ProviderResponse
from .azure_provider import AzureOpenAIProvider
from .openai_compatible_chat_provider import OpenAICompatibleChatProvider
from .factory import ProviderClientFactory
from .validators import validate_provider_connection, VALIDATABLE_TYPES

__all__ = [
    "BaseLLMProvider",
    "ChatCompletionProvider",
    "ProviderResponse",
    "AzureOpenAIProvider",
    "OpenAICompatibleChatProvider",
    "ProviderClientFactory",
    "validate_provider_connection",
    "VALIDATABLE_TYPES",
]
