"""
Inference Repository - Database operations for inference runs and results.

This repository handles the CRUD side of inferences plus the status/progress
writes the runner performs while an inference executes. Lifecycle rules
(which transitions are legal) live in ``services.inference_runner``.
"""

import uuid
from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from .models import (
    Dataset, DatasetItem, Inference, InferenceResult, INFERENCE_STATUSES, Model,
    Provider, utcnow,
)
from ..exceptions import InvalidTransitionError, ValidationError
from ..utils.logging_config import get_logger
from ..validation import validate_inference

logger = get_logger(__name__)

# Results and metrics are tied to these once a run has started
_REFERENCE_FIELDS = ("dataset_id", "provider_id", "model_id")


class InferenceRepository:
    """
    Repository for all database operations on inferences.

    Usage:
        with db.session_scope() as session:
            repo = InferenceRepository(session)

            inference = repo.create_inference({
                "name": "baseline", "dataset_id": ds_id,
                "provider_id": provider_id, "model_id": model_id,
            })
            completed = repo.list_inferences(status="completed")
    """

    def __init__(self, session: Session):
        self.session = session

    # ========== INFERENCES ==========

    def list_inferences(
        self,
        dataset_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        model_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Inference]:
        """
        Query inferences with filters.

        Returns:
            List of Inference objects, ordered by created_at descending
        """
        if status is not None and status not in INFERENCE_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(INFERENCE_STATUSES)}")

        query = self.session.query(Inference)
        if dataset_id:
            query = query.filter(Inference.dataset_id == dataset_id)
        if provider_id:
            query = query.filter(Inference.provider_id == provider_id)
        if model_id:
            query = query.filter(Inference.model_id == model_id)
        if status:
            query = query.filter(Inference.status == status)

        return query.order_by(desc(Inference.created_at)).all()

    def get_inference(self, inference_id: str) -> Optional[Inference]:
        return self.session.query(Inference).filter_by(id=inference_id).first()

    def create_inference(self, data: Mapping[str, Any]) -> Inference:
        """
        Create a pending inference.

        Raises:
            ValidationError: Missing fields, unknown references, or a model
                that does not belong to the given provider
        """
        validate_inference(data)
        self._check_references(data)

        now = utcnow()
        inference = Inference(
            id=str(uuid.uuid4()),
            name=data["name"].strip(),
            description=data.get("description") or None,
            dataset_id=data["dataset_id"],
            provider_id=data["provider_id"],
            model_id=data["model_id"],
            status="pending",
            progress=0,
            created_at=now,
            updated_at=now,
        )
        self.session.add(inference)
        self.session.flush()
        logger.debug(
            "Created inference: id=%s, dataset_id=%s, model_id=%s",
            inference.id, inference.dataset_id, inference.model_id,
        )
        return inference

    def update_inference(self, inference_id: str, data: Mapping[str, Any]) -> Optional[Inference]:
        """
        Replace an inference's descriptive fields and references.

        Raises:
            InvalidTransitionError: If a started inference would point at a
                different dataset, provider or model than its results describe
        """
        inference = self.get_inference(inference_id)
        if inference is None:
            return None
        validate_inference(data)
        self._check_references(data)
        if inference.status != "pending" and any(
            data[field] != getattr(inference, field) for field in _REFERENCE_FIELDS
        ):
            raise InvalidTransitionError(
                inference_id, inference.status, "change the dataset, provider or model of"
            )

        inference.name = data["name"].strip()
        inference.description = data.get("description") or None
        inference.dataset_id = data["dataset_id"]
        inference.provider_id = data["provider_id"]
        inference.model_id = data["model_id"]
        inference.updated_at = utcnow()
        self.session.flush()
        logger.debug("Updated inference: id=%s", inference_id)
        return inference

    def delete_inference(self, inference_id: str) -> bool:
        deleted = self.session.query(Inference)\
            .filter(Inference.id == inference_id)\
            .delete(synchronize_session=False)
        logger.debug("Deleted inference: id=%s, rows=%s", inference_id, deleted)
        return deleted > 0

    def set_status(
        self,
        inference_id: str,
        status: str,
        progress: Optional[int] = None,
        error: Optional[str] = None,
        metrics: Optional[dict] = None,
        completed_at: Optional[datetime] = None,
    ) -> Optional[Inference]:
        """
        Write a lifecycle state. ``error`` is always overwritten (None clears it).
        """
        if status not in INFERENCE_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(INFERENCE_STATUSES)}")
        inference = self.get_inference(inference_id)
        if inference is None:
            return None

        inference.status = status
        inference.error = error
        if progress is not None:
            inference.progress = _clamp_progress(progress)
        if metrics is not None:
            inference.metrics = dict(metrics)
        inference.completed_at = completed_at
        inference.updated_at = utcnow()
        self.session.flush()
        return inference

    def set_progress(self, inference_id: str, progress: int) -> Optional[Inference]:
        inference = self.get_inference(inference_id)
        if inference is None:
            return None
        inference.progress = _clamp_progress(progress)
        inference.updated_at = utcnow()
        self.session.flush()
        return inference

    # ========== RESULTS ==========

    def add_result(self, inference_id: str, data: Mapping[str, Any]) -> InferenceResult:
        """
        Persist the outcome for one dataset item.

        Args:
            inference_id: Owning inference
            data: dataset_item_id, input, expected_output, actual_output,
                metrics, metadata, error, latency, token_count
        """
        result = InferenceResult(
            id=str(uuid.uuid4()),
            inference_id=inference_id,
            dataset_item_id=data["dataset_item_id"],
            input=data["input"],
            expected_output=data.get("expected_output"),
            actual_output=data.get("actual_output") or "",
            metrics=data.get("metrics"),
            metadata_json=data.get("metadata"),
            error=data.get("error"),
            latency=data.get("latency"),
            token_count=data.get("token_count"),
            created_at=utcnow(),
        )
        self.session.add(result)
        self.session.flush()
        return result

    def list_results(self, inference_id: str) -> List[InferenceResult]:
        return self.session.query(InferenceResult)\
            .filter(InferenceResult.inference_id == inference_id)\
            .order_by(InferenceResult.created_at)\
            .all()

    def get_result(self, inference_id: str, result_id: str) -> Optional[InferenceResult]:
        return self.session.query(InferenceResult)\
            .filter_by(id=result_id, inference_id=inference_id)\
            .first()

    # ========== HELPERS ==========

    def _check_references(self, data: Mapping[str, Any]) -> None:
        errors = []
        if self.session.get(Dataset, data["dataset_id"]) is None:
            errors.append(f"dataset {data['dataset_id']} does not exist")
        if self.session.get(Provider, data["provider_id"]) is None:
            errors.append(f"provider {data['provider_id']} does not exist")
        model = self.session.get(Model, data["model_id"])
        if model is None:
            errors.append(f"model {data['model_id']} does not exist")
        elif model.provider_id != data["provider_id"]:
            errors.append(
                f"model {data['model_id']} does not belong to provider {data['provider_id']}"
            )
        if errors:
            raise ValidationError(errors)

    def get_dataset_items(self, dataset_id: str) -> List[DatasetItem]:
        """Items an inference will run over, in dataset order."""
        return self.session.query(DatasetItem)\
            .filter(DatasetItem.dataset_id == dataset_id)\
            .order_by(DatasetItem.created_at)\
            .all()


def _clamp_progress(progress: int) -> int:
    return max(0, min(100, int(progress)))
