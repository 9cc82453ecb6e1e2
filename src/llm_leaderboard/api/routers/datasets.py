from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from ...db.connection import DatabaseConnection
from ...db.dataset_repository import DatasetRepository
from ...services.dataset_transfer import export_dataset_json, import_dataset
from ...utils.logging_config import get_logger
from ...utils.text_utils import sanitize_for_filename
from ..dependencies import get_db, not_found
from ..schemas import DatasetForm, DatasetItemForm, DatasetItemOut, DatasetOut

router = APIRouter(prefix="/datasets", tags=["datasets"])
logger = get_logger(__name__)


# ========== DATASETS ==========

@router.get("", response_model=List[DatasetOut])
def list_datasets(
    dataset_type: Optional[str] = Query(None, alias="type"),
    db: DatabaseConnection = Depends(get_db),
):
    with db.session_scope() as session:
        rows = DatasetRepository(session).list_datasets(dataset_type)
        return [dataset.to_dict(item_count=count) for dataset, count in rows]


@router.post("", response_model=DatasetOut, status_code=status.HTTP_201_CREATED)
def create_dataset(form: DatasetForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        return DatasetRepository(session).create_dataset(form.form()).to_dict(item_count=0)


@router.post("/import", response_model=DatasetOut, status_code=status.HTTP_201_CREATED)
async def import_dataset_file(
    file: UploadFile = File(...),
    db: DatabaseConnection = Depends(get_db),
):
    """Create a dataset from an exported JSON document."""
    content = await file.read()
    with db.session_scope() as session:
        repo = DatasetRepository(session)
        dataset = import_dataset(repo, content, file.filename)
        return dataset.to_dict(item_count=repo.count_items(dataset.id))


@router.get("/{dataset_id}", response_model=DatasetOut)
def get_dataset(dataset_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        dataset = DatasetRepository(session).get_dataset(dataset_id)
        data = dataset.to_dict(include_items=True) if dataset else None
    if data is None:
        raise not_found("Dataset", dataset_id)
    return data


@router.put("/{dataset_id}", response_model=DatasetOut)
def update_dataset(dataset_id: str, form: DatasetForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        repo = DatasetRepository(session)
        dataset = repo.update_dataset(dataset_id, form.form())
        data = dataset.to_dict(item_count=repo.count_items(dataset_id)) if dataset else None
    if data is None:
        raise not_found("Dataset", dataset_id)
    return data


@router.delete("/{dataset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_dataset(dataset_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        deleted = DatasetRepository(session).delete_dataset(dataset_id)
    if not deleted:
        raise not_found("Dataset", dataset_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{dataset_id}/export")
def export_dataset(dataset_id: str, db: DatabaseConnection = Depends(get_db)):
    content = filename = None
    with db.session_scope() as session:
        dataset = DatasetRepository(session).get_dataset(dataset_id)
        if dataset is not None:
            content = export_dataset_json(dataset)
            filename = f"{sanitize_for_filename(dataset.name)}.json"
    if content is None:
        raise not_found("Dataset", dataset_id)
    logger.info("Exported dataset %s as %s", dataset_id, filename)
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ========== ITEMS ==========

@router.get("/{dataset_id}/items", response_model=List[DatasetItemOut])
def list_items(dataset_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        repo = DatasetRepository(session)
        exists = repo.get_dataset(dataset_id) is not None
        items = [item.to_dict() for item in repo.list_items(dataset_id)] if exists else []
    if not exists:
        raise not_found("Dataset", dataset_id)
    return items


@router.post(
    "/{dataset_id}/items", response_model=DatasetItemOut, status_code=status.HTTP_201_CREATED
)
def add_item(dataset_id: str, form: DatasetItemForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        item = DatasetRepository(session).add_item(dataset_id, form.form())
        data = item.to_dict() if item else None
    if data is None:
        raise not_found("Dataset", dataset_id)
    return data


@router.get("/{dataset_id}/items/{item_id}", response_model=DatasetItemOut)
def get_item(dataset_id: str, item_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        item = DatasetRepository(session).get_item(dataset_id, item_id)
        data = item.to_dict() if item else None
    if data is None:
        raise not_found("Dataset item", item_id)
    return data


@router.put("/{dataset_id}/items/{item_id}", response_model=DatasetItemOut)
def update_item(
    dataset_id: str,
    item_id: str,
    form: DatasetItemForm,
    db: DatabaseConnection = Depends(get_db),
):
    with db.session_scope() as session:
        item = DatasetRepository(session).update_item(dataset_id, item_id, form.form())
        data = item.to_dict() if item else None
    if data is None:
        raise not_found("Dataset item", item_id)
    return data


@router.delete("/{dataset_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(dataset_id: str, item_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        deleted = DatasetRepository(session).delete_item(dataset_id, item_id)
    if not deleted:
        raise not_found("Dataset item", item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
