from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ...db.connection import DatabaseConnection
from ...db.provider_repository import ProviderRepository
from ...providers.validators import VALIDATABLE_TYPES, validate_provider_connection
from ...utils.logging_config import get_logger
from ..dependencies import get_db, not_found
from ..schemas import (
    ModelOut, ProviderForm, ProviderOut, ProviderValidationOut, ProviderValidationRequest,
)

router = APIRouter(prefix="/providers", tags=["providers"])
logger = get_logger(__name__)


@router.get("", response_model=List[ProviderOut])
def list_providers(
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: DatabaseConnection = Depends(get_db),
):
    with db.session_scope() as session:
        return [p.to_dict() for p in ProviderRepository(session).list_providers(is_active)]


@router.post("", response_model=ProviderOut, status_code=status.HTTP_201_CREATED)
def create_provider(form: ProviderForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        provider = ProviderRepository(session).create_provider(form.form())
        return provider.to_dict()


@router.post("/validate/{provider_type}", response_model=ProviderValidationOut)
async def check_provider_connection(
    provider_type: str,
    body: Optional[ProviderValidationRequest] = None,
):
    """Check that the given credentials reach the provider; 400 when they do not."""
    if provider_type not in VALIDATABLE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No connection check for provider type: {provider_type}",
        )
    body = body or ProviderValidationRequest()
    valid = await validate_provider_connection(provider_type, body.endpoint, body.api_key)
    logger.info("Connection check for %s provider: valid=%s", provider_type, valid)
    if not valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Connection check failed for {provider_type} provider",
        )
    return {"type": provider_type, "valid": valid}


@router.get("/{provider_id}", response_model=ProviderOut)
def get_provider(provider_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        provider = ProviderRepository(session).get_provider(provider_id)
        data = provider.to_dict(include_models=True) if provider else None
    if data is None:
        raise not_found("Provider", provider_id)
    return data


@router.put("/{provider_id}", response_model=ProviderOut)
def update_provider(
    provider_id: str, form: ProviderForm, db: DatabaseConnection = Depends(get_db)
):
    with db.session_scope() as session:
        provider = ProviderRepository(session).update_provider(provider_id, form.form())
        data = provider.to_dict() if provider else None
    if data is None:
        raise not_found("Provider", provider_id)
    return data


@router.delete("/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_provider(provider_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        deleted = ProviderRepository(session).delete_provider(provider_id)
    if not deleted:
        raise not_found("Provider", provider_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{provider_id}/models", response_model=List[ModelOut])
def list_provider_models(
    provider_id: str,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: DatabaseConnection = Depends(get_db),
):
    with db.session_scope() as session:
        repo = ProviderRepository(session)
        exists = repo.get_provider(provider_id) is not None
        models = [m.to_dict() for m in repo.list_models(provider_id, is_active)] if exists else []
    if not exists:
        raise not_found("Provider", provider_id)
    return models
