import logfire

from datareg.domain.auth.model.identity import Identity, actor_id_of
from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.dataset.query.get_dataset import DatasetDetail
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import authenticated
from datareg.domain.shared.command import Command, CommandHandler


class SetVisibility(Command):
    dataset_id: DatasetId
    is_public: bool


class SetVisibilityHandler(CommandHandler[SetVisibility, DatasetDetail]):
    __auth__ = authenticated()
    identity: Identity
    registry: DatasetRegistry

    async def run(self, cmd: SetVisibility) -> DatasetDetail:
        with logfire.span("SetVisibility"):
            dataset = await self.registry.set_visibility(
                actor_id_of(self.identity), cmd.dataset_id, cmd.is_public
            )
            return DatasetDetail.from_dataset(dataset)
