"""
Database Models - SQLAlchemy ORM models.

Defines the schema for evaluation resources: providers and their models,
datasets and their items, inference runs and their per-item results, and the
metric catalog.

Ownership is strictly hierarchical and enforced with ``ON DELETE CASCADE``
foreign keys, so deleting a parent row removes its dependents in the store.
Opaque maps (parameters, metadata, metrics) use the ``JSON`` column type,
which SQLite stores as serialized text.
"""

from datetime import datetime, timezone
from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Index,
    Integer, JSON, String, Text,
)
from sqlalchemy.orm import declarative_base, relationship

from ..constants import DATASET_TYPES, INFERENCE_STATUSES, PROVIDER_TYPES

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value):
    if value is None:
        return None
    # SQLite hands back naive datetimes; every stored value is UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _in_clause(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


class Provider(Base):
    """
    A configured LLM backend.

    Attributes:
        id: UUID string assigned on create
        name: Display name
        type: One of PROVIDER_TYPES
        endpoint: Base URL (required for azure, ollama, custom)
        api_key: Credential (required for azure, openai, huggingface)
        is_active: Whether the provider is offered for new inferences
    """
    __tablename__ = 'providers'

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, index=True)
    endpoint = Column(Text, nullable=True)
    api_key = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    models = relationship(
        "Model", back_populates="provider", cascade="all, delete-orphan",
        passive_deletes=True, order_by="Model.created_at.desc()",
    )

    __table_args__ = (
        CheckConstraint(f"type IN ({_in_clause(PROVIDER_TYPES)})", name="check_provider_type"),
    )

    def __repr__(self) -> str:
        return f"<Provider(id={self.id}, name={self.name}, type={self.type})>"

    def to_dict(self, include_models: bool = False) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'endpoint': self.endpoint,
            'api_key': self.api_key,
            'is_active': bool(self.is_active),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if include_models:
            data['models'] = [m.to_dict() for m in self.models]
        return data


class Model(Base):
    """
    A specific LLM offered by a provider.

    ``endpoint`` and ``api_key`` override the provider's values when set.
    ``parameters`` is an opaque map (temperature, max_tokens, api_version, ...).
    """
    __tablename__ = 'models'

    id = Column(String(36), primary_key=True)
    provider_id = Column(
        String(36), ForeignKey('providers.id', ondelete='CASCADE'), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    display_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    endpoint = Column(Text, nullable=True)
    api_key = Column(Text, nullable=True)
    parameters = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    provider = relationship("Provider", back_populates="models")

    def __repr__(self) -> str:
        return f"<Model(id={self.id}, provider_id={self.provider_id}, name={self.name})>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'provider_id': self.provider_id,
            'name': self.name,
            'display_name': self.display_name,
            'description': self.description,
            'endpoint': self.endpoint,
            'api_key': self.api_key,
            'parameters': self.parameters,
            'is_active': bool(self.is_active),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Dataset(Base):
    """A named collection of input/expected-output pairs."""
    __tablename__ = 'datasets'

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    items = relationship(
        "DatasetItem", back_populates="dataset", cascade="all, delete-orphan",
        passive_deletes=True, order_by="DatasetItem.created_at",
    )

    __table_args__ = (
        CheckConstraint(f"type IN ({_in_clause(DATASET_TYPES)})", name="check_dataset_type"),
    )

    def __repr__(self) -> str:
        return f"<Dataset(id={self.id}, name={self.name}, type={self.type})>"

    def to_dict(self, include_items: bool = False, item_count: int = None) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.type,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
            data['item_count'] = len(data['items'])
        elif item_count is not None:
            data['item_count'] = item_count
        return data


class DatasetItem(Base):
    """One input (with optional expected output) belonging to a dataset."""
    __tablename__ = 'dataset_items'

    id = Column(String(36), primary_key=True)
    dataset_id = Column(
        String(36), ForeignKey('datasets.id', ondelete='CASCADE'), nullable=False, index=True
    )
    input = Column(Text, nullable=False)
    expected_output = Column(Text, nullable=True)
    metadata_json = Column('metadata', JSON, nullable=True)  # 'metadata' is reserved on declarative classes
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    dataset = relationship("Dataset", back_populates="items")

    def __repr__(self) -> str:
        return f"<DatasetItem(id={self.id}, dataset_id={self.dataset_id})>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'dataset_id': self.dataset_id,
            'input': self.input,
            'expected_output': self.expected_output,
            'metadata': self.metadata_json,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Inference(Base):
    """
    One evaluation run of a model against a dataset.

    Lifecycle: pending -> running -> completed | failed. ``progress`` is a
    percentage (0-100). ``metrics`` holds the aggregate scores written on
    completion.
    """
    __tablename__ = 'inferences'

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    dataset_id = Column(
        String(36), ForeignKey('datasets.id', ondelete='CASCADE'), nullable=False, index=True
    )
    provider_id = Column(
        String(36), ForeignKey('providers.id', ondelete='CASCADE'), nullable=False, index=True
    )
    model_id = Column(
        String(36), ForeignKey('models.id', ondelete='CASCADE'), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default='pending', index=True)
    progress = Column(Integer, nullable=False, default=0)
    metrics = Column(JSON, nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    results = relationship(
        "InferenceResult", back_populates="inference", cascade="all, delete-orphan",
        passive_deletes=True, order_by="InferenceResult.created_at",
    )

    __table_args__ = (
        CheckConstraint(
            f"status IN ({_in_clause(INFERENCE_STATUSES)})", name="check_inference_status"
        ),
        CheckConstraint("progress >= 0 AND progress <= 100", name="check_inference_progress"),
        Index('idx_inferences_status_created_at', 'status', 'created_at'),
    )

    def __repr__(self) -> str:
        return (
            f"<Inference(id={self.id}, name={self.name}, status={self.status}, "
            f"progress={self.progress})>"
        )

    def to_dict(self, include_results: bool = False) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'dataset_id': self.dataset_id,
            'provider_id': self.provider_id,
            'model_id': self.model_id,
            'status': self.status,
            'progress': self.progress,
            'metrics': self.metrics,
            'error': self.error,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'completed_at': _iso(self.completed_at),
        }
        if include_results:
            data['results'] = [r.to_dict() for r in self.results]
        return data


class InferenceResult(Base):
    """The model output for one dataset item within an inference."""
    __tablename__ = 'inference_results'

    id = Column(String(36), primary_key=True)
    inference_id = Column(
        String(36), ForeignKey('inferences.id', ondelete='CASCADE'), nullable=False, index=True
    )
    dataset_item_id = Column(
        String(36), ForeignKey('dataset_items.id', ondelete='CASCADE'), nullable=False, index=True
    )
    input = Column(Text, nullable=False)
    expected_output = Column(Text, nullable=True)
    actual_output = Column(Text, nullable=False, default='')
    metrics = Column(JSON, nullable=True)
    metadata_json = Column('metadata', JSON, nullable=True)
    error = Column(Text, nullable=True)
    latency = Column(Float, nullable=True)  # milliseconds
    token_count = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    inference = relationship("Inference", back_populates="results")

    def __repr__(self) -> str:
        return (
            f"<InferenceResult(id={self.id}, inference_id={self.inference_id}, "
            f"dataset_item_id={self.dataset_item_id})>"
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'inference_id': self.inference_id,
            'dataset_item_id': self.dataset_item_id,
            'input': self.input,
            'expected_output': self.expected_output,
            'actual_output': self.actual_output,
            'metrics': self.metrics,
            'metadata': self.metadata_json,
            'error': self.error,
            'latency': self.latency,
            'token_count': self.token_count,
            'created_at': _iso(self.created_at),
        }


class Metric(Base):
    """
    A scoring function definition in the metric catalog.

    ``type`` names the scorer (see ``services.scoring.SCORERS``);
    ``is_higher_better`` tells consumers which direction ranks first.
    """
    __tablename__ = 'metrics'

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)
    parameters = Column(JSON, nullable=True)
    is_higher_better = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Metric(id={self.id}, name={self.name}, type={self.type})>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.type,
            'parameters': self.parameters,
            'is_higher_better': bool(self.is_higher_better),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
