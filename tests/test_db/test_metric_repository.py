"""
Tests for MetricRepository.
"""

import pytest

from llm_leaderboard.db.metric_repository import MetricRepository
from llm_leaderboard.exceptions import ValidationError


def test_metric_crud(db_connection):
    with db_connection.session_scope() as session:
        repo = MetricRepository(session)
        metric = repo.create_metric({
            "name": "Contains answer", "type": "contains",
            "parameters": {"case_sensitive": False},
        })
        metric_id = metric.id
        assert metric.is_higher_better is True

    with db_connection.session_scope() as session:
        repo = MetricRepository(session)
        updated = repo.update_metric(metric_id, {
            "name": "Length ratio", "type": "length_ratio", "is_higher_better": False,
        })
        assert updated.type == "length_ratio"
        assert updated.parameters is None
        assert updated.is_higher_better is False

    with db_connection.session_scope() as session:
        repo = MetricRepository(session)
        assert repo.get_metric(metric_id).name == "Length ratio"
        assert repo.delete_metric(metric_id) is True
        assert repo.delete_metric(metric_id) is False
        assert repo.get_metric(metric_id) is None


def test_list_metrics_by_type(db_connection):
    with db_connection.session_scope() as session:
        repo = MetricRepository(session)
        repo.create_metric({"name": "Exact", "type": "exact_match"})
        repo.create_metric({"name": "BLEU", "type": "bleu"})

        assert len(repo.list_metrics()) == 2
        assert [m.name for m in repo.list_metrics(metric_type="bleu")] == ["BLEU"]


def test_metric_validation(db_connection):
    with db_connection.session_scope() as session:
        repo = MetricRepository(session)
        with pytest.raises(ValidationError, match="type is required"):
            repo.create_metric({"name": "No type"})
        with pytest.raises(ValidationError, match="parameters must be an object"):
            repo.create_metric({"name": "X", "type": "contains", "parameters": 3})
        assert repo.update_metric("missing", {"name": "X", "type": "contains"}) is None
