"""
LLM client interface.

Inference execution only talks to ``BaseLLMProvider``; any backend that can
turn a prompt into text plugs in behind it. ``ChatCompletionProvider`` holds
the request/response handling shared by the clients that speak the OpenAI
chat completions protocol.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import ProviderCallError


@dataclass
class ProviderResponse:
    """
    One completion, normalized across backends.

    Attributes:
        text: Generated text ("" when the backend returned no content)
        provider: Label of the client that produced it
        tokens: Total tokens (prompt + completion) when the backend reports usage
        latency_ms: Wall time of the request
        metadata: Backend details kept with the result (model, finish reason, ...)
    """
    text: str
    provider: str
    tokens: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        tokens_str = f"{self.tokens} tokens" if self.tokens else "unknown tokens"
        latency_str = f"{self.latency_ms:.2f}ms" if self.latency_ms else "unknown latency"
        return f"ProviderResponse(provider={self.provider}, {tokens_str}, {latency_str})"


class BaseLLMProvider(ABC):
    """Abstract LLM client. Usable as an async context manager."""

    @abstractmethod
    async def complete(self, prompt: str, **kwargs) -> ProviderResponse:
        """
        Send one prompt and return the completion.

        Args:
            prompt: The input prompt
            **kwargs: Sampling parameters such as temperature or max_tokens

        Raises:
            ProviderCallError: If the backend request fails
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a label identifying the provider and model."""

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class ChatCompletionProvider(BaseLLMProvider):
    """
    Base for clients backed by an OpenAI SDK chat completions client.

    Subclasses set ``client`` (the SDK client) and ``model`` (sent as the
    request's ``model``), and may extend ``response_metadata``.
    """

    error_prefix = "Chat completion"

    client: Any
    model: str

    def build_request(
        self,
        prompt: str,
        temperature: float,
        max_tokens: Optional[int],
        extra: dict[str, Any],
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        # None lets the server pick its default
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        params.update(extra)
        return params

    def response_metadata(self, completion: Any, params: dict[str, Any]) -> dict[str, Any]:
        choice = completion.choices[0]
        usage = completion.usage
        metadata = {
            "model": self.model,
            "finish_reason": choice.finish_reason,
            "prompt_tokens": usage.prompt_tokens if usage else None,
            "completion_tokens": usage.completion_tokens if usage else None,
            "temperature": params["temperature"],
        }
        if "max_tokens" in params:
            metadata["max_tokens"] = params["max_tokens"]
        return metadata

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> ProviderResponse:
        """
        Send ``prompt`` as a single user message.

        Extra keyword arguments are passed through to the API unchanged.
        """
        params = self.build_request(prompt, temperature, max_tokens, kwargs)

        started = time.perf_counter()
        try:
            completion = await self.client.chat.completions.create(**params)
        except Exception as e:
            raise ProviderCallError(f"{self.error_prefix} call failed: {e}") from e
        latency_ms = (time.perf_counter() - started) * 1000

        usage = completion.usage
        return ProviderResponse(
            text=completion.choices[0].message.content or "",
            provider=self.get_provider_name(),
            tokens=usage.total_tokens if usage else None,
            latency_ms=latency_ms,
            metadata=self.response_metadata(completion, params),
        )

    async def close(self) -> None:
        await self.client.close()
