import logfire

from datareg.domain.auth.model.identity import Identity, actor_id_of
from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.dataset.query.get_dataset import DatasetDetail
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import authenticated
from datareg.domain.shared.command import Command, CommandHandler


class UpdateAnalysis(Command):
    dataset_id: DatasetId
    analysis_ref: str


class UpdateAnalysisHandler(CommandHandler[UpdateAnalysis, DatasetDetail]):
    __auth__ = authenticated()
    identity: Identity
    registry: DatasetRegistry

    async def run(self, cmd: UpdateAnalysis) -> DatasetDetail:
        with logfire.span("UpdateAnalysis"):
            dataset = await self.registry.update_analysis(
                actor_id_of(self.identity), cmd.dataset_id, cmd.analysis_ref
            )
            return DatasetDetail.from_dataset(dataset)
