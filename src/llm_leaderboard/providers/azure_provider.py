"""
Azure OpenAI client.

Requests go to a named deployment rather than a model id, so the stored
Model's name (or its ``deployment_name`` parameter) selects the deployment.

Usage:
    from llm_leaderboard.config import ProviderConfig
    from llm_leaderboard.providers.azure_provider import AzureOpenAIProvider

    provider = AzureOpenAIProvider(ProviderConfig(
        name="azure",
        api_key="...",
        endpoint="https://my-resource.openai.azure.com/",
        deployment_name="gpt-4o",
        api_version="2024-02-15-preview",
    ))
    async with provider:
        response = await provider.complete("What is the capital of France?")
"""

from typing import Any

from openai import AsyncAzureOpenAI

from .base import ChatCompletionProvider
from ..config import ProviderConfig

_REQUIRED_SETTINGS = (
    ("api_key", "API key"),
    ("endpoint", "endpoint"),
    ("deployment_name", "deployment name"),
    ("api_version", "API version"),
)


class AzureOpenAIProvider(ChatCompletionProvider):
    """Chat client for one Azure OpenAI deployment."""

    error_prefix = "Azure OpenAI API"

    def __init__(self, config: ProviderConfig):
        """
        Args:
            config: Connection settings; every field in ``_REQUIRED_SETTINGS``
                must be set

        Raises:
            ValueError: Listing the missing settings
        """
        missing = [label for attr, label in _REQUIRED_SETTINGS if not getattr(config, attr)]
        if missing:
            raise ValueError(f"Azure provider is missing: {', '.join(missing)}")

        self.config = config
        self.deployment_name = config.deployment_name
        self.model = config.deployment_name
        self.client = AsyncAzureOpenAI(
            api_key=config.api_key,
            api_version=config.api_version,
            azure_endpoint=config.endpoint,
        )

    def response_metadata(self, completion: Any, params: dict[str, Any]) -> dict[str, Any]:
        metadata = super().response_metadata(completion, params)
        # The deployment hides which model version actually answered
        metadata["deployment"] = self.deployment_name
        metadata["model"] = completion.model
        return metadata

    def get_provider_name(self) -> str:
        return f"azure_openai_{self.deployment_name}"
