"""Mappers between the Dataset aggregate and datasets table rows."""

from datetime import UTC, datetime
from typing import Any

from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.aggregate import Dataset
from datareg.domain.dataset.model.value import DatasetId


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were stored as UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def row_to_dataset(row: dict[str, Any]) -> Dataset:
    return Dataset(
        id=DatasetId(row["id"]),
        dataset_ref=row["dataset_ref"],
        analysis_ref=row["analysis_ref"],
        owner=ActorId(row["owner"]),
        is_public=bool(row["is_public"]),
        created_at=_aware(row["created_at"]),
        views=row["views"],
        downloads=row["downloads"],
        citations=row["citations"],
    )


def dataset_to_dict(dataset: Dataset) -> dict[str, Any]:
    return {
        "id": dataset.id,
        "dataset_ref": dataset.dataset_ref,
        "analysis_ref": dataset.analysis_ref,
        "owner": dataset.owner,
        "is_public": dataset.is_public,
        "created_at": dataset.created_at,
        "views": dataset.views,
        "downloads": dataset.downloads,
        "citations": dataset.citations,
    }
