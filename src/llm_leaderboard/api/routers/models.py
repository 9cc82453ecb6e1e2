from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...db.connection import DatabaseConnection
from ...db.provider_repository import ProviderRepository
from ..dependencies import get_db, not_found
from ..schemas import ModelForm, ModelOut

router = APIRouter(prefix="/models", tags=["models"])


@router.get("", response_model=List[ModelOut])
def list_models(
    provider_id: Optional[str] = Query(None, alias="providerId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: DatabaseConnection = Depends(get_db),
):
    with db.session_scope() as session:
        return [m.to_dict() for m in ProviderRepository(session).list_models(provider_id, is_active)]


@router.post("", response_model=ModelOut, status_code=status.HTTP_201_CREATED)
def create_model(form: ModelForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        return ProviderRepository(session).create_model(form.form()).to_dict()


@router.get("/{model_id}", response_model=ModelOut)
def get_model(model_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        model = ProviderRepository(session).get_model(model_id)
        data = model.to_dict() if model else None
    if data is None:
        raise not_found("Model", model_id)
    return data


@router.put("/{model_id}", response_model=ModelOut)
def update_model(model_id: str, form: ModelForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        model = ProviderRepository(session).update_model(model_id, form.form())
        data = model.to_dict() if model else None
    if data is None:
        raise not_found("Model", model_id)
    return data


@router.delete("/{model_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_model(model_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        deleted = ProviderRepository(session).delete_model(model_id)
    if not deleted:
        raise not_found("Model", model_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
