"""
Metric Repository - Database operations for the metric catalog.
"""

import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from .models import Metric, utcnow
from ..utils.logging_config import get_logger
from ..validation import validate_metric

logger = get_logger(__name__)


class MetricRepository:
    """Repository for metric catalog entries."""

    def __init__(self, session: Session):
        self.session = session

    def list_metrics(self, metric_type: Optional[str] = None) -> List[Metric]:
        query = self.session.query(Metric)
        if metric_type:
            query = query.filter(Metric.type == metric_type)
        return query.order_by(desc(Metric.created_at)).all()

    def get_metric(self, metric_id: str) -> Optional[Metric]:
        return self.session.query(Metric).filter_by(id=metric_id).first()

    def create_metric(self, data: Mapping[str, Any]) -> Metric:
        validate_metric(data)
        now = utcnow()
        metric = Metric(
            id=str(uuid.uuid4()),
            name=data["name"].strip(),
            description=data.get("description") or None,
            type=data["type"].strip(),
            parameters=dict(data["parameters"]) if data.get("parameters") is not None else None,
            is_higher_better=bool(data.get("is_higher_better", True)),
            created_at=now,
            updated_at=now,
        )
        self.session.add(metric)
        self.session.flush()
        logger.debug("Created metric: id=%s, type=%s", metric.id, metric.type)
        return metric

    def update_metric(self, metric_id: str, data: Mapping[str, Any]) -> Optional[Metric]:
        metric = self.get_metric(metric_id)
        if metric is None:
            return None
        validate_metric(data)

        metric.name = data["name"].strip()
        metric.description = data.get("description") or None
        metric.type = data["type"].strip()
        metric.parameters = dict(data["parameters"]) if data.get("parameters") is not None else None
        metric.is_higher_better = bool(data.get("is_higher_better", True))
        metric.updated_at = utcnow()
        self.session.flush()
        return metric

    def delete_metric(self, metric_id: str) -> bool:
        deleted = self.session.query(Metric)\
            .filter(Metric.id == metric_id)\
            .delete(synchronize_session=False)
        return deleted > 0
