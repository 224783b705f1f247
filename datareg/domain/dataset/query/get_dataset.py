from datetime import datetime

from datareg.domain.auth.model.identity import Identity, actor_id_of
from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.aggregate import Dataset
from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import public
from datareg.domain.shared.query import Query, QueryHandler, Result


class GetDataset(Query):
    dataset_id: DatasetId


class DatasetDetail(Result):
    id: DatasetId
    dataset_ref: str
    analysis_ref: str
    owner: ActorId
    is_public: bool
    created_at: datetime
    views: int
    downloads: int
    citations: int

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> "DatasetDetail":
        return cls.model_validate(dataset.model_dump())


class GetDatasetHandler(QueryHandler[GetDataset, DatasetDetail]):
    __auth__ = public()
    identity: Identity
    registry: DatasetRegistry

    async def run(self, cmd: GetDataset) -> DatasetDetail:
        dataset = await self.registry.get(actor_id_of(self.identity), cmd.dataset_id)
        return DatasetDetail.from_dataset(dataset)
