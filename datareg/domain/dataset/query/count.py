from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import public
from datareg.domain.shared.query import Query, QueryHandler, Result


class CountDatasets(Query):
    pass


class DatasetCount(Result):
    datasets: int


class CountDatasetsHandler(QueryHandler[CountDatasets, DatasetCount]):
    __auth__ = public()
    registry: DatasetRegistry

    async def run(self, cmd: CountDatasets) -> DatasetCount:
        return DatasetCount(datasets=await self.registry.count())
