"""
Dataset import/export.

The exchange format is a single JSON document:

    {
      "name": "Capitals",
      "description": "Country capital QA",
      "type": "qa",
      "items": [
        {"input": "Capital of France?", "expectedOutput": "Paris", "metadata": {}}
      ]
    }

Import is all-or-nothing: the whole document is validated before anything is
written, and the dataset plus its items are created in one unit of work.
"""

import json
from pathlib import PurePath
from typing import Any, Mapping, Optional, Union

from ..db.dataset_repository import DatasetRepository
from ..db.models import Dataset
from ..exceptions import ValidationError
from ..utils.logging_config import get_logger
from ..validation import validate_dataset, validate_dataset_item

logger = get_logger(__name__)

EXPORT_FORMAT_VERSION = 1


def build_export_document(dataset: Dataset) -> dict[str, Any]:
    """Serialize a dataset and its items to the exchange format."""
    return {
        "name": dataset.name,
        "description": dataset.description,
        "type": dataset.type,
        "version": EXPORT_FORMAT_VERSION,
        "items": [
            {
                "input": item.input,
                "expectedOutput": item.expected_output,
                "metadata": item.metadata_json,
            }
            for item in dataset.items
        ],
    }


def export_dataset_json(dataset: Dataset) -> bytes:
    return json.dumps(build_export_document(dataset), ensure_ascii=False, indent=2).encode("utf-8")


def _item_form(raw: Any, index: int) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"items[{index}] must be an object")
    form = {
        "input": raw.get("input"),
        "expected_output": raw.get("expectedOutput", raw.get("expected_output")),
        "metadata": raw.get("metadata"),
    }
    if form["expected_output"] is not None and not isinstance(form["expected_output"], str):
        form["expected_output"] = str(form["expected_output"])
    if form["input"] is not None and not isinstance(form["input"], str):
        raise ValidationError(f"items[{index}].input must be a string")
    try:
        validate_dataset_item(form)
    except ValidationError as e:
        raise ValidationError([f"items[{index}]: {msg}" for msg in e.errors]) from None
    return form


def parse_import_document(
    content: Union[bytes, str], filename: Optional[str] = None
) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """
    Parse and validate an import document.

    Returns:
        (dataset form, list of item forms)

    Raises:
        ValidationError: Malformed JSON or invalid dataset/items
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError("file must be UTF-8 encoded JSON") from e
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValidationError(f"invalid JSON: {e.msg} (line {e.lineno})") from e

    if not isinstance(document, Mapping):
        raise ValidationError("document must be a JSON object")

    name = document.get("name")
    if not name and filename:
        name = PurePath(filename).stem
    dataset_form = {
        "name": name,
        "description": document.get("description"),
        "type": document.get("type") or "custom",
    }
    validate_dataset(dataset_form)

    raw_items = document.get("items", [])
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")
    item_forms = [_item_form(raw, i) for i, raw in enumerate(raw_items)]
    return dataset_form, item_forms


def import_dataset(
    repo: DatasetRepository,
    content: Union[bytes, str],
    filename: Optional[str] = None,
) -> Dataset:
    """
    Create a dataset (and its items) from an import document.

    The caller's session scope is the transaction: any failure rolls back
    both the dataset and the items.
    """
    dataset_form, item_forms = parse_import_document(content, filename)
    dataset = repo.create_dataset(dataset_form)
    repo.add_items(dataset.id, item_forms)
    logger.info(
        "Imported dataset %s (%s) with %d items", dataset.id, dataset.name, len(item_forms)
    )
    return dataset
