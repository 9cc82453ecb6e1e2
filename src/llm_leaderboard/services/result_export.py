"""CSV export of inference results."""

import csv
import io
import json
from typing import Iterable

from ..db.models import InferenceResult

CSV_COLUMNS = [
    "id",
    "datasetItemId",
    "input",
    "expectedOutput",
    "actualOutput",
    "latency",
    "tokenCount",
    "error",
    "metrics",
]


def results_to_csv(results: Iterable[InferenceResult]) -> str:
    """Render results as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for r in results:
        writer.writerow([
            r.id,
            r.dataset_item_id,
            r.input,
            r.expected_output if r.expected_output is not None else "",
            r.actual_output,
            r.latency if r.latency is not None else "",
            r.token_count if r.token_count is not None else "",
            r.error or "",
            json.dumps(r.metrics) if r.metrics is not None else "",
        ])
    return buffer.getvalue()
