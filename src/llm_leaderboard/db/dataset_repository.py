"""
Dataset Repository - Database operations for datasets and dataset items.
"""

import uuid
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from .models import Dataset, DatasetItem, utcnow
from ..utils.logging_config import get_logger
from ..validation import validate_dataset, validate_dataset_item

logger = get_logger(__name__)


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value if value.strip() else None


class DatasetRepository:
    """
    Repository for datasets and their items.

    Item counts are derived with a COUNT query, never stored.
    """

    def __init__(self, session: Session):
        self.session = session

    # ========== DATASETS ==========

    def list_datasets(self, dataset_type: Optional[str] = None) -> List[Tuple[Dataset, int]]:
        """
        Return (dataset, item_count) pairs, newest first.

        Args:
            dataset_type: Optional filter on dataset type
        """
        counts = self.session.query(
            DatasetItem.dataset_id,
            func.count(DatasetItem.id).label('item_count'),
        ).group_by(DatasetItem.dataset_id).subquery()

        query = self.session.query(Dataset, func.coalesce(counts.c.item_count, 0))\
            .outerjoin(counts, counts.c.dataset_id == Dataset.id)
        if dataset_type:
            query = query.filter(Dataset.type == dataset_type)

        return [(dataset, int(count)) for dataset, count in query.order_by(desc(Dataset.created_at)).all()]

    def get_dataset(self, dataset_id: str) -> Optional[Dataset]:
        return self.session.query(Dataset).filter_by(id=dataset_id).first()

    def count_items(self, dataset_id: str) -> int:
        return self.session.query(func.count(DatasetItem.id))\
            .filter(DatasetItem.dataset_id == dataset_id)\
            .scalar()

    def create_dataset(self, data: Mapping[str, Any]) -> Dataset:
        """
        Create a dataset.

        Raises:
            ValidationError: Missing name or unknown type
        """
        validate_dataset(data)
        now = utcnow()
        dataset = Dataset(
            id=str(uuid.uuid4()),
            name=data["name"].strip(),
            description=_optional_text(data.get("description")),
            type=data["type"],
            created_at=now,
            updated_at=now,
        )
        self.session.add(dataset)
        self.session.flush()
        logger.debug("Created dataset: id=%s, type=%s", dataset.id, dataset.type)
        return dataset

    def update_dataset(self, dataset_id: str, data: Mapping[str, Any]) -> Optional[Dataset]:
        dataset = self.get_dataset(dataset_id)
        if dataset is None:
            return None
        validate_dataset(data)

        dataset.name = data["name"].strip()
        dataset.description = _optional_text(data.get("description"))
        dataset.type = data["type"]
        dataset.updated_at = utcnow()
        self.session.flush()
        logger.debug("Updated dataset: id=%s", dataset_id)
        return dataset

    def delete_dataset(self, dataset_id: str) -> bool:
        """Delete a dataset; items, inferences and results follow via cascade."""
        deleted = self.session.query(Dataset)\
            .filter(Dataset.id == dataset_id)\
            .delete(synchronize_session=False)
        logger.debug("Deleted dataset: id=%s, rows=%s", dataset_id, deleted)
        return deleted > 0

    # ========== ITEMS ==========

    def list_items(self, dataset_id: str) -> List[DatasetItem]:
        """Return a dataset's items in insertion order."""
        return self.session.query(DatasetItem)\
            .filter(DatasetItem.dataset_id == dataset_id)\
            .order_by(DatasetItem.created_at)\
            .all()

    def get_item(self, dataset_id: str, item_id: str) -> Optional[DatasetItem]:
        return self.session.query(DatasetItem)\
            .filter_by(id=item_id, dataset_id=dataset_id)\
            .first()

    def add_item(self, dataset_id: str, data: Mapping[str, Any]) -> Optional[DatasetItem]:
        """
        Add an item to a dataset.

        Returns:
            The new DatasetItem, or None if the dataset does not exist
        """
        validate_dataset_item(data)
        if self.get_dataset(dataset_id) is None:
            return None
        item = self._build_item(dataset_id, data)
        self.session.add(item)
        self.session.flush()
        logger.debug("Added dataset item: id=%s, dataset_id=%s", item.id, dataset_id)
        return item

    def add_items(self, dataset_id: str, items: Iterable[Mapping[str, Any]]) -> List[DatasetItem]:
        """Bulk-add items to an existing dataset (used by import)."""
        items = list(items)
        for data in items:
            validate_dataset_item(data)
        # Spread timestamps so created_at ordering matches input order
        base = utcnow()
        objects = [
            self._build_item(dataset_id, data, now=base + timedelta(microseconds=i))
            for i, data in enumerate(items)
        ]
        self.session.add_all(objects)
        self.session.flush()
        logger.debug("Added %d dataset items to dataset_id=%s", len(objects), dataset_id)
        return objects

    def update_item(
        self, dataset_id: str, item_id: str, data: Mapping[str, Any]
    ) -> Optional[DatasetItem]:
        item = self.get_item(dataset_id, item_id)
        if item is None:
            return None
        validate_dataset_item(data)

        item.input = data["input"]
        item.expected_output = _optional_text(data.get("expected_output"))
        item.metadata_json = dict(data["metadata"]) if data.get("metadata") is not None else None
        item.updated_at = utcnow()
        self.session.flush()
        logger.debug("Updated dataset item: id=%s", item_id)
        return item

    def delete_item(self, dataset_id: str, item_id: str) -> bool:
        deleted = self.session.query(DatasetItem)\
            .filter(DatasetItem.id == item_id, DatasetItem.dataset_id == dataset_id)\
            .delete(synchronize_session=False)
        return deleted > 0

    @staticmethod
    def _build_item(
        dataset_id: str, data: Mapping[str, Any], now: Optional[datetime] = None
    ) -> DatasetItem:
        now = now or utcnow()
        return DatasetItem(
            id=str(uuid.uuid4()),
            dataset_id=dataset_id,
            input=data["input"],
            expected_output=_optional_text(data.get("expected_output")),
            metadata_json=dict(data["metadata"]) if data.get("metadata") is not None else None,
            created_at=now,
            updated_at=now,
        )
