"""Stats API routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from datareg.domain.dataset.query.count import CountDatasets, CountDatasetsHandler, DatasetCount

router = APIRouter(
    prefix="/stats",
    tags=["stats"],
    route_class=DishkaRoute,
)


@router.get("", response_model=DatasetCount)
async def get_stats(handler: FromDishka[CountDatasetsHandler]) -> DatasetCount:
    """Total datasets registered, public and private."""
    return await handler.run(CountDatasets())
