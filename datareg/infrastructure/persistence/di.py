from typing import AsyncIterable

from dishka import from_context, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from datareg.config import Config
from datareg.domain.dataset.port.repository import DatasetRepository
from datareg.domain.shared.port.event_repository import EventRepository
from datareg.domain.shared.port.unit_of_work import UnitOfWork
from datareg.infrastructure.persistence.database import create_db_engine, create_session_factory
from datareg.infrastructure.persistence.repository.dataset import SQLAlchemyDatasetRepository
from datareg.infrastructure.persistence.repository.event import SQLAlchemyEventRepository
from datareg.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork
from datareg.util.di.base import Provider
from datareg.util.di.scope import Scope


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # One session per unit of work. Anything still pending when the scope
    # closes (worker claims, delivery marks) is committed here.
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session
            await session.commit()

    uow = provide(SQLAlchemyUnitOfWork, scope=Scope.UOW, provides=UnitOfWork)
    dataset_repo = provide(
        SQLAlchemyDatasetRepository, scope=Scope.UOW, provides=DatasetRepository
    )
    event_repo = provide(SQLAlchemyEventRepository, scope=Scope.UOW, provides=EventRepository)
