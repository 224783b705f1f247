"""Fixtures backed by a real SQLite file database."""

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from datareg.config import Config, DatabaseConfig
from datareg.domain.dataset.service.registry import DatasetRegistry, RegistryLock
from datareg.domain.shared.model.subscription_registry import SubscriptionRegistry
from datareg.domain.shared.outbox import Outbox
from datareg.infrastructure.event.di import HANDLERS, build_subscription_registry
from datareg.infrastructure.persistence.database import create_db_engine, create_session_factory
from datareg.infrastructure.persistence.repository.dataset import SQLAlchemyDatasetRepository
from datareg.infrastructure.persistence.repository.event import SQLAlchemyEventRepository
from datareg.infrastructure.persistence.tables import metadata
from datareg.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'datareg.db'}"


@pytest.fixture
async def engine(database_url: str) -> AsyncIterator[AsyncEngine]:
    engine = create_db_engine(Config(database=DatabaseConfig(url=database_url)))
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def subscriptions() -> SubscriptionRegistry:
    return build_subscription_registry(HANDLERS)


@pytest.fixture
def registry_lock() -> RegistryLock:
    return RegistryLock(asyncio.Lock())


@pytest.fixture
def make_registry(
    subscriptions: SubscriptionRegistry, registry_lock: RegistryLock
) -> Callable[[AsyncSession], DatasetRegistry]:
    """Build a registry over one session, wired the way the container wires it."""

    def _make(session: AsyncSession) -> DatasetRegistry:
        return DatasetRegistry(
            datasets=SQLAlchemyDatasetRepository(session),
            outbox=Outbox(SQLAlchemyEventRepository(session), subscriptions),
            uow=SQLAlchemyUnitOfWork(session),
            lock=registry_lock,
        )

    return _make
