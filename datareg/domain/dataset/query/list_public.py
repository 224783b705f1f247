from pydantic import Field

from datareg.domain.dataset.query.get_dataset import DatasetDetail
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import public
from datareg.domain.shared.query import Query, QueryHandler, Result


class ListPublicDatasets(Query):
    limit: int | None = None
    offset: int | None = None


class DatasetList(Result):
    items: list[DatasetDetail] = Field(default_factory=list)


class ListPublicDatasetsHandler(QueryHandler[ListPublicDatasets, DatasetList]):
    __auth__ = public()
    registry: DatasetRegistry

    async def run(self, cmd: ListPublicDatasets) -> DatasetList:
        datasets = await self.registry.list_public(limit=cmd.limit, offset=cmd.offset)
        return DatasetList(items=[DatasetDetail.from_dataset(d) for d in datasets])
