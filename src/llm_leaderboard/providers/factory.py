"""
Provider Client Factory - builds LLM clients from stored provider/model records.

A stored Provider holds the backend type and default connection settings; a
Model names the model and may override endpoint/api_key. The factory merges
the two into a ``ProviderConfig`` and picks the client class by type.
"""

from typing import Any, Mapping, Optional

from .azure_provider import AzureOpenAIProvider
from .base import BaseLLMProvider
from .openai_compatible_chat_provider import OpenAICompatibleChatProvider
from ..config import Config, ProviderConfig

HUGGINGFACE_ROUTER_URL = "https://router.huggingface.co/v1"


def _openai_base_url(provider_type: str, endpoint: Optional[str]) -> Optional[str]:
    """Return the OpenAI-protocol base URL for a provider type."""
    if provider_type == "ollama":
        # Ollama's native root is configured; its OpenAI API lives under /v1
        root = endpoint.rstrip("/")
        return root if root.endswith("/v1") else f"{root}/v1"
    if provider_type == "huggingface":
        return endpoint or HUGGINGFACE_ROUTER_URL
    # openai: None means the SDK default; custom: endpoint is required
    return endpoint or None


class ProviderClientFactory:
    """
    Factory for creating LLM client instances from stored records.

    Usage:
        factory = ProviderClientFactory()
        client = factory.create(provider.to_dict(), model.to_dict())
        response = await client.complete("Hello")
    """

    SUPPORTED_TYPES = ("azure", "openai", "ollama", "huggingface", "custom")

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def build_config(
        self, provider: Mapping[str, Any], model: Mapping[str, Any]
    ) -> ProviderConfig:
        """Merge provider defaults with model overrides."""
        parameters = model.get("parameters") or {}
        return ProviderConfig(
            name=provider["type"],
            api_key=model.get("api_key") or provider.get("api_key"),
            endpoint=model.get("endpoint") or provider.get("endpoint"),
            model=model["name"],
            deployment_name=parameters.get("deployment_name") or model["name"],
            api_version=parameters.get("api_version") or self.config.azure_api_version,
        )

    def create(
        self, provider: Mapping[str, Any], model: Mapping[str, Any]
    ) -> BaseLLMProvider:
        """
        Create a client for a provider/model pair.

        Args:
            provider: Provider record (``Provider.to_dict()``)
            model: Model record (``Model.to_dict()``)

        Returns:
            BaseLLMProvider instance

        Raises:
            ValueError: If the provider type is unknown or required
                connection settings are missing
        """
        provider_type = (provider.get("type") or "").lower()
        if provider_type not in self.SUPPORTED_TYPES:
            raise ValueError(
                f"Unknown provider type: {provider_type}. "
                f"Available types: {', '.join(self.SUPPORTED_TYPES)}"
            )

        provider_config = self.build_config(provider, model)

        if provider_type == "azure":
            return AzureOpenAIProvider(provider_config)

        if provider_type in ("ollama", "custom") and not provider_config.endpoint:
            raise ValueError(f"{provider_type} provider requires an endpoint")
        if provider_type in ("openai", "huggingface") and not provider_config.api_key:
            raise ValueError(f"{provider_type} provider requires an API key")

        return OpenAICompatibleChatProvider(
            base_url=_openai_base_url(provider_type, provider_config.endpoint),
            model=provider_config.model,
            api_key=provider_config.api_key or "not-needed",
            provider_label=f"{provider_type}_{provider_config.model}",
        )
