"""
Inference Runner - lifecycle and result persistence for inference runs.

States: pending -> running -> completed | failed.

``start()`` and ``stop()`` are the synchronous transitions behind the
``run``/``stop`` API calls. ``execute()`` is the long-running part: it feeds
the dataset through an ``InferenceExecutor``, stores one result per item,
keeps ``progress`` current and writes the final status and metrics.

Every step opens its own short unit of work, so a ``stop`` (or a delete)
issued from another request is observed by the executing loop at the next
item boundary.

Usage:
    runner = InferenceRunner(db)
    runner.start(inference_id)          # pending -> running
    await runner.execute(inference_id)  # running -> completed | failed
"""

from contextlib import aclosing
from typing import Optional

from ..db.connection import DatabaseConnection
from ..db.inference_repository import InferenceRepository
from ..db.metric_repository import MetricRepository
from ..db.models import utcnow
from ..db.provider_repository import ProviderRepository
from ..exceptions import InvalidTransitionError
from ..utils.logging_config import get_logger
from .executors import (
    ExecutionItem, ExecutionRequest, InferenceExecutor, ProviderInferenceExecutor,
)
from .scoring import MetricSpec, aggregate, score_result

logger = get_logger(__name__)

STOPPED_MESSAGE = "Stopped by user"


class InferenceRunner:
    """
    Drives inferences through their lifecycle.

    The runner is stateless between calls: the status column is the only
    coordination point, which keeps it safe to share across requests.
    """

    def __init__(
        self,
        db: DatabaseConnection,
        executor: Optional[InferenceExecutor] = None,
    ):
        """
        Args:
            db: Database connection used for every unit of work
            executor: Execution engine (default: ProviderInferenceExecutor)
        """
        self.db = db
        self.executor = executor or ProviderInferenceExecutor()

    # ========== TRANSITIONS ==========

    def start(self, inference_id: str) -> Optional[dict]:
        """
        Move a pending inference to running.

        Returns:
            The updated inference as a dict, or None if the id is unknown

        Raises:
            InvalidTransitionError: If the inference is not pending
        """
        with self.db.session_scope() as session:
            repo = InferenceRepository(session)
            inference = repo.get_inference(inference_id)
            if inference is None:
                return None
            if inference.status != "pending":
                raise InvalidTransitionError(inference_id, inference.status, "run")

            repo.set_status(inference_id, "running", progress=0)
            logger.info("Inference %s: pending -> running", inference_id)
            return inference.to_dict()

    def stop(self, inference_id: str) -> Optional[dict]:
        """
        Halt a running inference. It ends as failed with STOPPED_MESSAGE.

        Raises:
            InvalidTransitionError: If the inference is not running
        """
        with self.db.session_scope() as session:
            repo = InferenceRepository(session)
            inference = repo.get_inference(inference_id)
            if inference is None:
                return None
            if inference.status != "running":
                raise InvalidTransitionError(inference_id, inference.status, "stop")

            repo.set_status(
                inference_id, "failed", error=STOPPED_MESSAGE, completed_at=utcnow()
            )
            logger.info("Inference %s: running -> failed (stopped)", inference_id)
            return inference.to_dict()

    # ========== EXECUTION ==========

    async def execute(self, inference_id: str) -> None:
        """
        Execute a running inference to completion.

        Never raises for execution problems: executor failures are recorded
        on the inference as ``failed``.
        """
        request, specs = self._prepare(inference_id)
        if request is None:
            return

        total = len(request.items)
        if total == 0:
            self._complete(inference_id)
            return

        items_by_id = {item.dataset_item_id: item for item in request.items}
        done = 0
        try:
            async with aclosing(self.executor.execute(request)) as stream:
                async for outcome in stream:
                    item = items_by_id.get(outcome.dataset_item_id)
                    if item is None:
                        logger.warning(
                            "Inference %s: executor returned unknown item %s",
                            inference_id, outcome.dataset_item_id,
                        )
                        continue
                    done += 1
                    if not self._record_outcome(inference_id, item, outcome, specs, done, total):
                        logger.info("Inference %s no longer running, stopping execution", inference_id)
                        return
        except Exception as e:
            logger.error("Inference %s failed: %s", inference_id, e, exc_info=True)
            self._fail(inference_id, str(e) or e.__class__.__name__)
            return

        self._complete(inference_id)

    # ========== HELPERS ==========

    def _prepare(self, inference_id: str):
        """Load everything execution needs in one unit of work."""
        with self.db.session_scope() as session:
            inference_repo = InferenceRepository(session)
            inference = inference_repo.get_inference(inference_id)
            if inference is None:
                logger.warning("Inference %s not found, nothing to execute", inference_id)
                return None, None
            if inference.status != "running":
                logger.warning(
                    "Inference %s is %s, not running; skipping execution",
                    inference_id, inference.status,
                )
                return None, None

            provider_repo = ProviderRepository(session)
            provider = provider_repo.get_provider(inference.provider_id)
            model = provider_repo.get_model(inference.model_id)
            items = [
                ExecutionItem(
                    dataset_item_id=item.id,
                    input=item.input,
                    expected_output=item.expected_output,
                )
                for item in inference_repo.get_dataset_items(inference.dataset_id)
            ]
            specs = MetricSpec.from_catalog(
                m.to_dict() for m in MetricRepository(session).list_metrics()
            )
            request = ExecutionRequest(
                inference_id=inference_id,
                provider=provider.to_dict(),
                model=model.to_dict(),
                items=items,
            )
        return request, specs

    def _record_outcome(self, inference_id, item, outcome, specs, done, total) -> bool:
        """Persist one outcome. Returns False if the inference stopped running."""
        with self.db.session_scope() as session:
            repo = InferenceRepository(session)
            inference = repo.get_inference(inference_id)
            if inference is None or inference.status != "running":
                return False

            scores = None
            if not outcome.error:
                scores = score_result(outcome.actual_output, item.expected_output, specs)

            repo.add_result(inference_id, {
                "dataset_item_id": item.dataset_item_id,
                "input": item.input,
                "expected_output": item.expected_output,
                "actual_output": outcome.actual_output,
                "metrics": scores,
                "metadata": outcome.metadata or None,
                "error": outcome.error,
                "latency": outcome.latency_ms,
                "token_count": outcome.token_count,
            })
            repo.set_progress(inference_id, round(done * 100 / total))
        return True

    def _complete(self, inference_id: str) -> None:
        with self.db.session_scope() as session:
            repo = InferenceRepository(session)
            inference = repo.get_inference(inference_id)
            if inference is None or inference.status != "running":
                return
            summary = aggregate(r.to_dict() for r in repo.list_results(inference_id))
            repo.set_status(
                inference_id, "completed", progress=100, metrics=summary,
                completed_at=utcnow(),
            )
        logger.info("Inference %s: running -> completed", inference_id)

    def _fail(self, inference_id: str, error: str) -> None:
        with self.db.session_scope() as session:
            repo = InferenceRepository(session)
            inference = repo.get_inference(inference_id)
            if inference is None or inference.status != "running":
                return
            repo.set_status(inference_id, "failed", error=error, completed_at=utcnow())
        logger.info("Inference %s: running -> failed", inference_id)
