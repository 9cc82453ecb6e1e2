"""
Scoring functions for inference results.

A scorer takes (actual_output, expected_output, parameters) and returns a
float. Metric catalog entries select a scorer through their ``type``.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

Scorer = Callable[[str, str, Mapping[str, Any]], float]

DEFAULT_METRIC_TYPES = ("exact_match",)


def _normalize(text: str, params: Mapping[str, Any]) -> str:
    text = (text or "").strip()
    if not params.get("case_sensitive", False):
        text = text.lower()
    return text


def exact_match(actual: str, expected: str, params: Mapping[str, Any]) -> float:
    return 1.0 if _normalize(actual, params) == _normalize(expected, params) else 0.0


def contains(actual: str, expected: str, params: Mapping[str, Any]) -> float:
    return 1.0 if _normalize(expected, params) in _normalize(actual, params) else 0.0


def length_ratio(actual: str, expected: str, params: Mapping[str, Any]) -> float:
    expected_len = len((expected or "").strip())
    if expected_len == 0:
        return 0.0
    return len((actual or "").strip()) / expected_len


SCORERS: dict[str, Scorer] = {
    "exact_match": exact_match,
    "contains": contains,
    "length_ratio": length_ratio,
}


@dataclass
class MetricSpec:
    """A scorer bound to the catalog name it reports under."""
    name: str
    type: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.type not in SCORERS:
            raise ValueError(f"Unknown metric type: {self.type}")
        self.parameters = dict(self.parameters or {})

    @classmethod
    def from_catalog(cls, metrics: Iterable[Mapping[str, Any]]) -> list["MetricSpec"]:
        """
        Build specs from catalog records, skipping types without a scorer.

        Falls back to DEFAULT_METRIC_TYPES when nothing in the catalog is scorable.
        """
        specs = [
            cls(m["name"], m["type"], m.get("parameters"))
            for m in metrics
            if m.get("type") in SCORERS
        ]
        if not specs:
            specs = [cls(t, t) for t in DEFAULT_METRIC_TYPES]
        return specs


def score_result(
    actual: Optional[str],
    expected: Optional[str],
    specs: Iterable[MetricSpec],
) -> Optional[dict[str, float]]:
    """
    Score one output. Returns None when there is nothing to compare against.
    """
    if expected is None or actual is None:
        return None
    return {
        spec.name: SCORERS[spec.type](actual, expected, spec.parameters)
        for spec in specs
    }


def aggregate(results: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """
    Summarize per-result scores and runtime stats for an inference.

    Args:
        results: dicts with ``metrics``, ``latency``, ``token_count``, ``error``

    Returns:
        Mean of every per-result metric, plus avg_latency_ms, total_tokens,
        error_count and scored_count
    """
    totals: dict[str, float] = {}
    counts: dict[str, int] = {}
    latencies = []
    total_tokens = 0
    error_count = 0
    scored = 0

    for r in results:
        if r.get("error"):
            error_count += 1
        if r.get("latency") is not None:
            latencies.append(r["latency"])
        if r.get("token_count"):
            total_tokens += r["token_count"]
        metrics = r.get("metrics")
        if metrics:
            scored += 1
            for name, value in metrics.items():
                totals[name] = totals.get(name, 0.0) + value
                counts[name] = counts.get(name, 0) + 1

    summary: dict[str, Any] = {
        name: round(totals[name] / counts[name], 4) for name in totals
    }
    summary["avg_latency_ms"] = round(sum(latencies) / len(latencies), 2) if latencies else None
    summary["total_tokens"] = total_tokens
    summary["error_count"] = error_count
    summary["scored_count"] = scored
    return summary
