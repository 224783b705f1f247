"""Usage counters: views, downloads and citations.

Anyone may call these, anonymous callers included. Whether the increment is
honored is decided by the registry; a refused increment is reported as
``counted=False`` rather than as an error.
"""

from datareg.domain.auth.model.identity import Identity, actor_id_of
from datareg.domain.dataset.model.value import DatasetId, UsageCounter
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.shared.authorization.gate import public
from datareg.domain.shared.command import Command, CommandHandler, Result


class RecordUsage(Command):
    dataset_id: DatasetId
    counter: UsageCounter


class UsageRecorded(Result):
    counted: bool


class RecordUsageHandler(CommandHandler[RecordUsage, UsageRecorded]):
    __auth__ = public()
    identity: Identity
    registry: DatasetRegistry

    async def run(self, cmd: RecordUsage) -> UsageRecorded:
        actor = actor_id_of(self.identity)
        match cmd.counter:
            case UsageCounter.VIEWS:
                counted = await self.registry.record_view(actor, cmd.dataset_id)
            case UsageCounter.DOWNLOADS:
                counted = await self.registry.record_download(actor, cmd.dataset_id)
            case UsageCounter.CITATIONS:
                counted = await self.registry.record_citation(actor, cmd.dataset_id)
        return UsageRecorded(counted=counted)
