from sqlalchemy import Select, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.aggregate import Dataset
from datareg.domain.dataset.model.value import DatasetId, UsageCounter
from datareg.domain.dataset.port.repository import DatasetRepository
from datareg.domain.shared.error import ConflictError, DuplicateReferenceError
from datareg.infrastructure.persistence.mappers.dataset import dataset_to_dict, row_to_dataset
from datareg.infrastructure.persistence.tables import datasets_table

# Largest value a BIGINT id column holds
MAX_DATASET_ID = 2**63 - 1

_COUNTER_COLUMNS = {
    UsageCounter.VIEWS: datasets_table.c.views,
    UsageCounter.DOWNLOADS: datasets_table.c.downloads,
    UsageCounter.CITATIONS: datasets_table.c.citations,
}


class SQLAlchemyDatasetRepository(DatasetRepository):
    """SQLAlchemy implementation of DatasetRepository (SQLite or PostgreSQL)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, dataset: Dataset) -> None:
        stmt = insert(datasets_table).values(**dataset_to_dict(dataset))
        try:
            await self.session.execute(stmt)
        except IntegrityError as e:
            # Another process can win either race between our check and insert.
            if "dataset_ref" in str(e.orig):
                raise DuplicateReferenceError(dataset.dataset_ref) from e
            raise ConflictError(f"Dataset id already taken: {dataset.id}") from e

    async def get(self, dataset_id: DatasetId) -> Dataset | None:
        if not 0 <= dataset_id <= MAX_DATASET_ID:
            return None
        stmt = select(datasets_table).where(datasets_table.c.id == dataset_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_dataset(dict(row)) if row else None

    async def ref_exists(self, dataset_ref: str) -> bool:
        stmt = select(datasets_table.c.id).where(datasets_table.c.dataset_ref == dataset_ref)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def update(self, dataset: Dataset) -> None:
        stmt = (
            update(datasets_table)
            .where(datasets_table.c.id == dataset.id)
            .values(analysis_ref=dataset.analysis_ref, is_public=dataset.is_public)
        )
        await self.session.execute(stmt)

    async def increment(self, dataset_id: DatasetId, counter: UsageCounter) -> None:
        column = _COUNTER_COLUMNS[counter]
        stmt = (
            update(datasets_table)
            .where(datasets_table.c.id == dataset_id)
            .values({column: column + 1})
        )
        await self.session.execute(stmt)

    async def count(self) -> int:
        stmt = select(func.count()).select_from(datasets_table)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def list_public(
        self, *, limit: int | None = None, offset: int | None = None
    ) -> list[Dataset]:
        stmt = select(datasets_table).where(datasets_table.c.is_public.is_(True))
        return await self._page(stmt, limit, offset)

    async def list_by_owner(
        self, owner: ActorId, *, limit: int | None = None, offset: int | None = None
    ) -> list[Dataset]:
        stmt = select(datasets_table).where(datasets_table.c.owner == str(owner))
        return await self._page(stmt, limit, offset)

    async def _page(self, stmt: Select, limit: int | None, offset: int | None) -> list[Dataset]:
        stmt = stmt.order_by(datasets_table.c.id.asc())
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [row_to_dataset(dict(r)) for r in result.mappings().all()]
