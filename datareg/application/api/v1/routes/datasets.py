"""Dataset REST routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query
from pydantic import BaseModel

from datareg.domain.dataset.command.record_usage import (
    RecordUsage,
    RecordUsageHandler,
    UsageRecorded,
)
from datareg.domain.dataset.command.set_visibility import SetVisibility, SetVisibilityHandler
from datareg.domain.dataset.command.update_analysis import UpdateAnalysis, UpdateAnalysisHandler
from datareg.domain.dataset.command.upload import (
    DatasetUploadedResult,
    UploadDataset,
    UploadDatasetHandler,
)
from datareg.domain.dataset.model.value import DatasetId, UsageCounter
from datareg.domain.dataset.query.get_dataset import DatasetDetail, GetDataset, GetDatasetHandler
from datareg.domain.dataset.query.list_owned import ListOwnedDatasets, ListOwnedDatasetsHandler
from datareg.domain.dataset.query.list_public import (
    DatasetList,
    ListPublicDatasets,
    ListPublicDatasetsHandler,
)

router = APIRouter(prefix="/datasets", tags=["Datasets"], route_class=DishkaRoute)


class AnalysisBody(BaseModel):
    analysis_ref: str


class VisibilityBody(BaseModel):
    is_public: bool


@router.post("", response_model=DatasetUploadedResult, status_code=201)
async def upload_dataset(
    body: UploadDataset,
    handler: FromDishka[UploadDatasetHandler],
) -> DatasetUploadedResult:
    return await handler.run(body)


@router.get("", response_model=DatasetList)
async def list_public_datasets(
    handler: FromDishka[ListPublicDatasetsHandler],
    limit: int | None = Query(None, description="Maximum number of datasets"),
    offset: int | None = Query(None, description="Number of datasets to skip"),
) -> DatasetList:
    """Public datasets in ascending id order."""
    return await handler.run(ListPublicDatasets(limit=limit, offset=offset))


# Declared before /{dataset_id} so "mine" is not read as an id
@router.get("/mine", response_model=DatasetList)
async def list_my_datasets(
    handler: FromDishka[ListOwnedDatasetsHandler],
    limit: int | None = Query(None, description="Maximum number of datasets"),
    offset: int | None = Query(None, description="Number of datasets to skip"),
) -> DatasetList:
    """The caller's own datasets, private ones included."""
    return await handler.run(ListOwnedDatasets(limit=limit, offset=offset))


@router.get("/{dataset_id}", response_model=DatasetDetail)
async def get_dataset(
    dataset_id: DatasetId,
    handler: FromDishka[GetDatasetHandler],
) -> DatasetDetail:
    return await handler.run(GetDataset(dataset_id=dataset_id))


@router.put("/{dataset_id}/analysis", response_model=DatasetDetail)
async def update_analysis(
    dataset_id: DatasetId,
    body: AnalysisBody,
    handler: FromDishka[UpdateAnalysisHandler],
) -> DatasetDetail:
    return await handler.run(
        UpdateAnalysis(dataset_id=dataset_id, analysis_ref=body.analysis_ref)
    )


@router.put("/{dataset_id}/visibility", response_model=DatasetDetail)
async def set_visibility(
    dataset_id: DatasetId,
    body: VisibilityBody,
    handler: FromDishka[SetVisibilityHandler],
) -> DatasetDetail:
    return await handler.run(SetVisibility(dataset_id=dataset_id, is_public=body.is_public))


@router.post("/{dataset_id}/{counter}", response_model=UsageRecorded)
async def record_usage(
    dataset_id: DatasetId,
    counter: UsageCounter,
    handler: FromDishka[RecordUsageHandler],
) -> UsageRecorded:
    """Count a view, download or citation.

    ``counted`` is false when the dataset is private and the caller is not
    its owner; that is not an error.
    """
    return await handler.run(RecordUsage(dataset_id=dataset_id, counter=counter))
