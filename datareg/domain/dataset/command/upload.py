import logfire

from datareg.domain.auth.model.identity import Identity, actor_id_of
from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import authenticated
from datareg.domain.shared.command import Command, CommandHandler, Result


class UploadDataset(Command):
    dataset_ref: str
    analysis_ref: str = ""
    is_public: bool


class DatasetUploadedResult(Result):
    id: DatasetId


class UploadDatasetHandler(CommandHandler[UploadDataset, DatasetUploadedResult]):
    __auth__ = authenticated()
    identity: Identity
    registry: DatasetRegistry

    async def run(self, cmd: UploadDataset) -> DatasetUploadedResult:
        with logfire.span("UploadDataset"):
            dataset_id = await self.registry.upload(
                actor_id_of(self.identity),
                dataset_ref=cmd.dataset_ref,
                analysis_ref=cmd.analysis_ref,
                is_public=cmd.is_public,
            )
            logfire.info("Dataset uploaded", dataset_id=dataset_id)
            return DatasetUploadedResult(id=dataset_id)
