from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status

from ...db.connection import DatabaseConnection
from ...db.inference_repository import InferenceRepository
from ...services.inference_runner import InferenceRunner
from ...services.result_export import results_to_csv
from ...utils.logging_config import get_logger
from ...utils.text_utils import sanitize_for_filename
from ..dependencies import get_db, get_runner, not_found
from ..schemas import InferenceForm, InferenceOut, InferenceResultOut, InferenceUpdate

router = APIRouter(prefix="/inferences", tags=["inferences"])
logger = get_logger(__name__)

# Fields a PUT may change; lifecycle fields are only written by the runner.
_EDITABLE_FIELDS = ("name", "description", "dataset_id", "provider_id", "model_id")


@router.get("", response_model=List[InferenceOut])
def list_inferences(
    dataset_id: Optional[str] = Query(None, alias="datasetId"),
    provider_id: Optional[str] = Query(None, alias="providerId"),
    model_id: Optional[str] = Query(None, alias="modelId"),
    inference_status: Optional[str] = Query(None, alias="status"),
    db: DatabaseConnection = Depends(get_db),
):
    with db.session_scope() as session:
        inferences = InferenceRepository(session).list_inferences(
            dataset_id=dataset_id,
            provider_id=provider_id,
            model_id=model_id,
            status=inference_status,
        )
        return [i.to_dict() for i in inferences]


@router.post("", response_model=InferenceOut, status_code=status.HTTP_201_CREATED)
def create_inference(form: InferenceForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        return InferenceRepository(session).create_inference(form.form()).to_dict()


@router.get("/{inference_id}", response_model=InferenceOut)
def get_inference(inference_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        inference = InferenceRepository(session).get_inference(inference_id)
        data = inference.to_dict() if inference else None
    if data is None:
        raise not_found("Inference", inference_id)
    return data


@router.put("/{inference_id}", response_model=InferenceOut)
def update_inference(
    inference_id: str, form: InferenceUpdate, db: DatabaseConnection = Depends(get_db)
):
    """Update the fields present in the body; the rest keep their stored values."""
    with db.session_scope() as session:
        repo = InferenceRepository(session)
        inference = repo.get_inference(inference_id)
        data = None
        if inference is not None:
            merged = {field: getattr(inference, field) for field in _EDITABLE_FIELDS}
            merged.update(form.model_dump(exclude_unset=True))
            data = repo.update_inference(inference_id, merged).to_dict()
    if data is None:
        raise not_found("Inference", inference_id)
    return data


@router.delete("/{inference_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inference(inference_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        deleted = InferenceRepository(session).delete_inference(inference_id)
    if not deleted:
        raise not_found("Inference", inference_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ========== LIFECYCLE ==========

@router.post("/{inference_id}/run", response_model=InferenceOut)
def run_inference(
    inference_id: str,
    background_tasks: BackgroundTasks,
    runner: InferenceRunner = Depends(get_runner),
):
    """Move a pending inference to running and execute it in the background."""
    data = runner.start(inference_id)
    if data is None:
        raise not_found("Inference", inference_id)
    background_tasks.add_task(runner.execute, inference_id)
    return data


@router.post("/{inference_id}/stop", response_model=InferenceOut)
def stop_inference(inference_id: str, runner: InferenceRunner = Depends(get_runner)):
    data = runner.stop(inference_id)
    if data is None:
        raise not_found("Inference", inference_id)
    return data


# ========== RESULTS ==========

@router.get("/{inference_id}/results", response_model=List[InferenceResultOut])
def list_results(inference_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        repo = InferenceRepository(session)
        exists = repo.get_inference(inference_id) is not None
        results = [r.to_dict() for r in repo.list_results(inference_id)] if exists else []
    if not exists:
        raise not_found("Inference", inference_id)
    return results


@router.get("/{inference_id}/results/{result_id}", response_model=InferenceResultOut)
def get_result(inference_id: str, result_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        result = InferenceRepository(session).get_result(inference_id, result_id)
        data = result.to_dict() if result else None
    if data is None:
        raise not_found("Result", result_id)
    return data


@router.get("/{inference_id}/export")
def export_results(inference_id: str, db: DatabaseConnection = Depends(get_db)):
    """Download the inference's results as CSV."""
    content = filename = None
    with db.session_scope() as session:
        repo = InferenceRepository(session)
        inference = repo.get_inference(inference_id)
        if inference is not None:
            content = results_to_csv(repo.list_results(inference_id))
            filename = f"{sanitize_for_filename(inference.name)}_results.csv"
    if content is None:
        raise not_found("Inference", inference_id)
    logger.info("Exported results of inference %s as %s", inference_id, filename)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
