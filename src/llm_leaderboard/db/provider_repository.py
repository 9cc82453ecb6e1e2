"""
Provider Repository - Database operations for providers and their models.

Models are a flat resource: ``provider_id`` is an ordinary field, and model
operations do not need the provider id in the call path.
"""

import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from .models import Model, Provider, utcnow
from ..exceptions import ValidationError
from ..utils.logging_config import get_logger
from ..validation import validate_model, validate_provider

logger = get_logger(__name__)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip() if isinstance(value, str) else value
    return value or None


class ProviderRepository:
    """
    Repository for providers and models.

    Usage:
        with db.session_scope() as session:
            repo = ProviderRepository(session)
            provider = repo.create_provider({"name": "Local", "type": "ollama",
                                             "endpoint": "http://localhost:11434"})
            repo.create_model({"provider_id": provider.id, "name": "llama3.1:8b",
                               "display_name": "Llama 3.1 8B"})
    """

    def __init__(self, session: Session):
        self.session = session

    # ========== PROVIDERS ==========

    def list_providers(self, is_active: Optional[bool] = None) -> List[Provider]:
        """Return providers, newest first."""
        query = self.session.query(Provider)
        if is_active is not None:
            query = query.filter(Provider.is_active == is_active)
        return query.order_by(desc(Provider.created_at)).all()

    def get_provider(self, provider_id: str) -> Optional[Provider]:
        return self.session.query(Provider).filter_by(id=provider_id).first()

    def create_provider(self, data: Mapping[str, Any]) -> Provider:
        """
        Create a provider.

        Args:
            data: Form data with name, type, endpoint, api_key, is_active

        Returns:
            The persisted Provider

        Raises:
            ValidationError: Missing name or a field required by the type
        """
        validate_provider(data)
        now = utcnow()
        provider = Provider(
            id=str(uuid.uuid4()),
            name=data["name"].strip(),
            type=data["type"],
            endpoint=_blank_to_none(data.get("endpoint")),
            api_key=_blank_to_none(data.get("api_key")),
            is_active=bool(data.get("is_active", True)),
            created_at=now,
            updated_at=now,
        )
        self.session.add(provider)
        self.session.flush()
        logger.debug("Created provider: id=%s, type=%s", provider.id, provider.type)
        return provider

    def update_provider(self, provider_id: str, data: Mapping[str, Any]) -> Optional[Provider]:
        """Replace a provider's mutable fields. Returns None if the id is unknown."""
        provider = self.get_provider(provider_id)
        if provider is None:
            return None
        validate_provider(data)

        provider.name = data["name"].strip()
        provider.type = data["type"]
        provider.endpoint = _blank_to_none(data.get("endpoint"))
        provider.api_key = _blank_to_none(data.get("api_key"))
        provider.is_active = bool(data.get("is_active", True))
        provider.updated_at = utcnow()
        self.session.flush()
        logger.debug("Updated provider: id=%s", provider_id)
        return provider

    def delete_provider(self, provider_id: str) -> bool:
        """Delete a provider; its models and inferences go with it via cascade."""
        deleted = self.session.query(Provider)\
            .filter(Provider.id == provider_id)\
            .delete(synchronize_session=False)
        logger.debug("Deleted provider: id=%s, rows=%s", provider_id, deleted)
        return deleted > 0

    # ========== MODELS ==========

    def list_models(
        self,
        provider_id: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[Model]:
        """Return models, newest first, optionally for one provider."""
        query = self.session.query(Model)
        if provider_id:
            query = query.filter(Model.provider_id == provider_id)
        if is_active is not None:
            query = query.filter(Model.is_active == is_active)
        return query.order_by(desc(Model.created_at)).all()

    def get_model(self, model_id: str) -> Optional[Model]:
        return self.session.query(Model).filter_by(id=model_id).first()

    def create_model(self, data: Mapping[str, Any]) -> Model:
        """
        Create a model under an existing provider.

        Raises:
            ValidationError: Missing required fields or unknown provider_id
        """
        validate_model(data)
        self._require_provider(data["provider_id"])

        now = utcnow()
        model = Model(
            id=str(uuid.uuid4()),
            provider_id=data["provider_id"],
            name=data["name"].strip(),
            display_name=data["display_name"].strip(),
            description=_blank_to_none(data.get("description")),
            endpoint=_blank_to_none(data.get("endpoint")),
            api_key=_blank_to_none(data.get("api_key")),
            parameters=dict(data["parameters"]) if data.get("parameters") is not None else None,
            is_active=bool(data.get("is_active", True)),
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        self.session.flush()
        logger.debug("Created model: id=%s, provider_id=%s", model.id, model.provider_id)
        return model

    def update_model(self, model_id: str, data: Mapping[str, Any]) -> Optional[Model]:
        """Replace a model's mutable fields. Returns None if the id is unknown."""
        model = self.get_model(model_id)
        if model is None:
            return None
        validate_model(data)
        if data["provider_id"] != model.provider_id:
            self._require_provider(data["provider_id"])

        model.provider_id = data["provider_id"]
        model.name = data["name"].strip()
        model.display_name = data["display_name"].strip()
        model.description = _blank_to_none(data.get("description"))
        model.endpoint = _blank_to_none(data.get("endpoint"))
        model.api_key = _blank_to_none(data.get("api_key"))
        model.parameters = dict(data["parameters"]) if data.get("parameters") is not None else None
        model.is_active = bool(data.get("is_active", True))
        model.updated_at = utcnow()
        self.session.flush()
        logger.debug("Updated model: id=%s", model_id)
        return model

    def delete_model(self, model_id: str) -> bool:
        deleted = self.session.query(Model)\
            .filter(Model.id == model_id)\
            .delete(synchronize_session=False)
        logger.debug("Deleted model: id=%s, rows=%s", model_id, deleted)
        return deleted > 0

    def _require_provider(self, provider_id: str) -> None:
        if self.get_provider(provider_id) is None:
            raise ValidationError(f"provider {provider_id} does not exist")
