"""
Tests for DatasetRepository.
"""

import pytest

from llm_leaderboard.db.dataset_repository import DatasetRepository
from llm_leaderboard.db.models import DatasetItem, Inference
from llm_leaderboard.exceptions import ValidationError


def test_create_dataset(db_connection):
    with db_connection.session_scope() as session:
        dataset = DatasetRepository(session).create_dataset({
            "name": "  Summaries ", "description": "", "type": "summarization",
        })
        assert dataset.name == "Summaries"
        assert dataset.description is None


@pytest.mark.parametrize(
    "data, message",
    [
        ({"name": "", "type": "qa"}, "name is required"),
        ({"name": "X", "type": "poetry"}, "type must be one of"),
        ({"name": "X"}, "type must be one of"),
    ],
)
def test_create_dataset_validation(db_connection, data, message):
    with db_connection.session_scope() as session:
        with pytest.raises(ValidationError, match=message):
            DatasetRepository(session).create_dataset(data)


def test_list_datasets_with_counts(db_connection, seeded):
    with db_connection.session_scope() as session:
        repo = DatasetRepository(session)
        repo.create_dataset({"name": "Empty", "type": "custom"})

        counts = {dataset.name: count for dataset, count in repo.list_datasets()}
        assert counts == {"Capitals": 3, "Empty": 0}
        assert [d.name for d, _ in repo.list_datasets(dataset_type="custom")] == ["Empty"]


def test_update_dataset(db_connection, seeded):
    with db_connection.session_scope() as session:
        repo = DatasetRepository(session)
        updated = repo.update_dataset(seeded["dataset_id"], {
            "name": "World capitals", "description": "Geography", "type": "qa",
        })
        assert updated.name == "World capitals"
        assert updated.description == "Geography"
        assert repo.update_dataset("missing", {"name": "X", "type": "qa"}) is None


def test_delete_dataset_cascades(db_connection, seeded):
    with db_connection.session_scope() as session:
        assert DatasetRepository(session).delete_dataset(seeded["dataset_id"]) is True

    with db_connection.session_scope() as session:
        assert session.query(DatasetItem).count() == 0
        assert session.query(Inference).count() == 0
        assert DatasetRepository(session).delete_dataset(seeded["dataset_id"]) is False


def test_items_keep_insertion_order(db_connection, seeded):
    with db_connection.session_scope() as session:
        repo = DatasetRepository(session)
        added = repo.add_item(seeded["dataset_id"], {"input": "Capital of Peru?"})
        ids = [item.id for item in repo.list_items(seeded["dataset_id"])]

    assert ids == seeded["item_ids"] + [added.id]


def test_add_item_to_missing_dataset_returns_none(db_connection):
    with db_connection.session_scope() as session:
        assert DatasetRepository(session).add_item("missing", {"input": "hi"}) is None


def test_add_item_validation(db_connection, seeded):
    with db_connection.session_scope() as session:
        repo = DatasetRepository(session)
        with pytest.raises(ValidationError, match="input is required"):
            repo.add_item(seeded["dataset_id"], {"input": "   "})
        with pytest.raises(ValidationError, match="metadata must be an object"):
            repo.add_item(seeded["dataset_id"], {"input": "x", "metadata": "tag"})


def test_add_items_validates_all_before_writing(db_connection, seeded):
    with db_connection.session_scope() as session:
        repo = DatasetRepository(session)
        with pytest.raises(ValidationError):
            repo.add_items(seeded["dataset_id"], [{"input": "ok"}, {"input": ""}])
        assert repo.count_items(seeded["dataset_id"]) == 3


def test_update_item(db_connection, seeded):
    item_id = seeded["item_ids"][0]
    with db_connection.session_scope() as session:
        repo = DatasetRepository(session)
        updated = repo.update_item(seeded["dataset_id"], item_id, {
            "input": "Capital of France?", "expected_output": "Paris, France",
            "metadata": {"difficulty": "easy"},
        })
        assert updated.expected_output == "Paris, France"
        assert updated.metadata_json == {"difficulty": "easy"}
        # item ids are scoped to their dataset
        assert repo.update_item("other", item_id, {"input": "x"}) is None


def test_get_and_delete_item(db_connection, seeded):
    item_id = seeded["item_ids"][1]
    with db_connection.session_scope() as session:
        repo = DatasetRepository(session)
        assert repo.get_item(seeded["dataset_id"], item_id).expected_output == "Rome"
        assert repo.get_item("other", item_id) is None
        assert repo.delete_item(seeded["dataset_id"], item_id) is True
        assert repo.delete_item(seeded["dataset_id"], item_id) is False
        assert repo.count_items(seeded["dataset_id"]) == 2
