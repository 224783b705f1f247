from datetime import UTC, datetime

from datareg.domain.dataset.model.aggregate import Dataset
from datareg.infrastructure.persistence.mappers.dataset import dataset_to_dict, row_to_dataset


def _row(**overrides) -> dict:
    row = {
        "id": 4,
        "dataset_ref": "bafy-data",
        "analysis_ref": "",
        "owner": "alice",
        "is_public": True,
        "created_at": datetime(2026, 3, 1, 12, 0),
        "views": 2,
        "downloads": 1,
        "citations": 0,
    }
    row.update(overrides)
    return row


def test_naive_timestamp_read_as_utc():
    dataset = row_to_dataset(_row())
    assert dataset.created_at.tzinfo is UTC


def test_aware_timestamp_kept():
    created = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
    assert row_to_dataset(_row(created_at=created)).created_at == created


def test_dataset_to_dict_has_every_column():
    dataset = Dataset(
        id=0,
        dataset_ref="bafy-data",
        owner="alice",
        is_public=False,
        created_at=datetime.now(UTC),
    )
    assert dataset_to_dict(dataset) == {
        "id": 0,
        "dataset_ref": "bafy-data",
        "analysis_ref": "",
        "owner": "alice",
        "is_public": False,
        "created_at": dataset.created_at,
        "views": 0,
        "downloads": 0,
        "citations": 0,
    }
