import asyncio

from dishka import provide

from datareg.domain.dataset.command.record_usage import RecordUsageHandler
from datareg.domain.dataset.command.set_visibility import SetVisibilityHandler
from datareg.domain.dataset.command.update_analysis import UpdateAnalysisHandler
from datareg.domain.dataset.command.upload import UploadDatasetHandler
from datareg.domain.dataset.port.repository import DatasetRepository
from datareg.domain.dataset.query.count import CountDatasetsHandler
from datareg.domain.dataset.query.get_dataset import GetDatasetHandler
from datareg.domain.dataset.query.list_owned import ListOwnedDatasetsHandler
from datareg.domain.dataset.query.list_public import ListPublicDatasetsHandler
from datareg.domain.dataset.service.registry import DatasetRegistry, RegistryLock
from datareg.domain.shared.outbox import Outbox
from datareg.domain.shared.port.unit_of_work import UnitOfWork
from datareg.util.di.base import Provider
from datareg.util.di.scope import Scope


class DatasetProvider(Provider):
    # One lock for the whole process; every request's registry shares it.
    @provide(scope=Scope.APP)
    def get_registry_lock(self) -> RegistryLock:
        return RegistryLock(asyncio.Lock())

    @provide(scope=Scope.UOW)
    def get_registry(
        self,
        datasets: DatasetRepository,
        outbox: Outbox,
        uow: UnitOfWork,
        lock: RegistryLock,
    ) -> DatasetRegistry:
        return DatasetRegistry(datasets=datasets, outbox=outbox, uow=uow, lock=lock)

    # Command Handlers
    upload_handler = provide(UploadDatasetHandler, scope=Scope.UOW)
    update_analysis_handler = provide(UpdateAnalysisHandler, scope=Scope.UOW)
    set_visibility_handler = provide(SetVisibilityHandler, scope=Scope.UOW)
    record_usage_handler = provide(RecordUsageHandler, scope=Scope.UOW)

    # Query Handlers
    get_dataset_handler = provide(GetDatasetHandler, scope=Scope.UOW)
    list_public_handler = provide(ListPublicDatasetsHandler, scope=Scope.UOW)
    list_owned_handler = provide(ListOwnedDatasetsHandler, scope=Scope.UOW)
    count_handler = provide(CountDatasetsHandler, scope=Scope.UOW)
