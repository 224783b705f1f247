from datareg.domain.auth.model.identity import Identity, actor_id_of
from datareg.domain.dataset.query.get_dataset import DatasetDetail
from datareg.domain.dataset.query.list_public import DatasetList
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import authenticated
from datareg.domain.shared.query import Query, QueryHandler


class ListOwnedDatasets(Query):
    limit: int | None = None
    offset: int | None = None


class ListOwnedDatasetsHandler(QueryHandler[ListOwnedDatasets, DatasetList]):
    """The caller's own datasets. There is no way to list another actor's."""

    __auth__ = authenticated()
    identity: Identity
    registry: DatasetRegistry

    async def run(self, cmd: ListOwnedDatasets) -> DatasetList:
        datasets = await self.registry.list_owned_by(
            actor_id_of(self.identity), limit=cmd.limit, offset=cmd.offset
        )
        return DatasetList(items=[DatasetDetail.from_dataset(d) for d in datasets])
