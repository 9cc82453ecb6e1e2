"""
Chat client for OpenAI-protocol endpoints.

One class covers OpenAI itself, Ollama (under ``/v1``), the Hugging Face
router and custom servers such as vLLM; only ``base_url`` and the key differ.
Each instance is bound to one stored model.
"""

from typing import Optional

from openai import AsyncOpenAI

from .base import ChatCompletionProvider
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class OpenAICompatibleChatProvider(ChatCompletionProvider):
    """Chat client for any endpoint speaking the OpenAI chat completions API."""

    error_prefix = "OpenAI-compatible API"

    def __init__(
        self,
        base_url: Optional[str],
        model: str,
        api_key: str = "not-needed",
        provider_label: str = "openai_compatible",
    ) -> None:
        """
        Args:
            base_url: Root URL of the API (e.g. ``http://localhost:11434/v1``);
                ``None`` uses the SDK default
            model: Model id sent with every request
            api_key: Bearer key; local servers accept any value
            provider_label: Returned by ``get_provider_name()``
        """
        self.base_url = base_url
        self.model = model
        self.provider_label = provider_label
        self.client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        logger.debug("Chat client ready: label=%s, base_url=%s", provider_label, base_url)

    def get_provider_name(self) -> str:
        return self.provider_label
