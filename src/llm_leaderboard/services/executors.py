"""
Inference executors.

An executor turns an inference request (provider, model, dataset items) into
a stream of per-item outcomes. The runner owns persistence and lifecycle; the
executor only talks to the model backend, so alternative engines (a remote
batch service, a test double) can be swapped in through the
``InferenceExecutor`` interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

from ..providers.factory import ProviderClientFactory
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

# Model parameters forwarded to complete(); everything else is client config
COMPLETION_PARAMETERS = ("temperature", "max_tokens", "top_p")


@dataclass
class ExecutionItem:
    """One dataset item to run."""
    dataset_item_id: str
    input: str
    expected_output: Optional[str] = None


@dataclass
class ExecutionRequest:
    """Everything an executor needs to run one inference."""
    inference_id: str
    provider: dict[str, Any]
    model: dict[str, Any]
    items: list[ExecutionItem]


@dataclass
class ItemOutcome:
    """
    The result of running one item.

    A failed call is an outcome with ``error`` set, not an exception.
    """
    dataset_item_id: str
    actual_output: str = ""
    latency_ms: Optional[float] = None
    token_count: Optional[int] = None
    error: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


class InferenceExecutor(ABC):
    """Capability interface for running an inference."""

    @abstractmethod
    def execute(self, request: ExecutionRequest) -> AsyncIterator[ItemOutcome]:
        """
        Yield one ItemOutcome per request item, in order.

        Raising (instead of yielding an error outcome) aborts the whole
        inference; the runner records it as failed.
        """


class ProviderInferenceExecutor(InferenceExecutor):
    """
    Runs items sequentially against the stored provider/model through the
    matching LLM client.
    """

    def __init__(self, factory: Optional[ProviderClientFactory] = None):
        self.factory = factory or ProviderClientFactory()

    async def execute(self, request: ExecutionRequest) -> AsyncIterator[ItemOutcome]:
        client = self.factory.create(request.provider, request.model)
        parameters = request.model.get("parameters") or {}
        call_kwargs = {
            key: parameters[key] for key in COMPLETION_PARAMETERS if key in parameters
        }
        logger.info(
            "Executing inference %s with %s (%d items)",
            request.inference_id, client.get_provider_name(), len(request.items),
        )

        try:
            for item in request.items:
                try:
                    response = await client.complete(item.input, **call_kwargs)
                except Exception as e:
                    logger.warning(
                        "Item %s failed in inference %s: %s",
                        item.dataset_item_id, request.inference_id, e,
                    )
                    yield ItemOutcome(dataset_item_id=item.dataset_item_id, error=str(e))
                    continue

                yield ItemOutcome(
                    dataset_item_id=item.dataset_item_id,
                    actual_output=response.text,
                    latency_ms=response.latency_ms,
                    token_count=response.tokens,
                    metadata={
                        key: value for key, value in response.metadata.items()
                        if value is not None
                    },
                )
        finally:
            await client.close()
