from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...db.connection import DatabaseConnection
from ...db.metric_repository import MetricRepository
from ..dependencies import get_db, not_found
from ..schemas import MetricForm, MetricOut

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", response_model=List[MetricOut])
def list_metrics(
    metric_type: Optional[str] = Query(None, alias="type"),
    db: DatabaseConnection = Depends(get_db),
):
    with db.session_scope() as session:
        return [m.to_dict() for m in MetricRepository(session).list_metrics(metric_type)]


@router.post("", response_model=MetricOut, status_code=status.HTTP_201_CREATED)
def create_metric(form: MetricForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        return MetricRepository(session).create_metric(form.form()).to_dict()


@router.get("/{metric_id}", response_model=MetricOut)
def get_metric(metric_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        metric = MetricRepository(session).get_metric(metric_id)
        data = metric.to_dict() if metric else None
    if data is None:
        raise not_found("Metric", metric_id)
    return data


@router.put("/{metric_id}", response_model=MetricOut)
def update_metric(metric_id: str, form: MetricForm, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        metric = MetricRepository(session).update_metric(metric_id, form.form())
        data = metric.to_dict() if metric else None
    if data is None:
        raise not_found("Metric", metric_id)
    return data


@router.delete("/{metric_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_metric(metric_id: str, db: DatabaseConnection = Depends(get_db)):
    with db.session_scope() as session:
        deleted = MetricRepository(session).delete_metric(metric_id)
    if not deleted:
        raise not_found("Metric", metric_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
