"""DatasetRegistry - the registry's integrity and access-control rules."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import NewType

from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.event import (
    USAGE_EVENTS,
    AnalysisUpdated,
    DatasetUploaded,
    VisibilityChanged,
)
from datareg.domain.dataset.model.aggregate import Dataset
from datareg.domain.dataset.model.value import DatasetId, UsageCounter
from datareg.domain.dataset.policy import CAN_COUNT, CAN_MUTATE, CAN_READ
from datareg.domain.dataset.port.repository import DatasetRepository
from datareg.domain.shared.error import (
    AccessDeniedError,
    DuplicateReferenceError,
    NotFoundError,
    NotOwnerError,
    ValidationError,
)
from datareg.domain.shared.outbox import Outbox
from datareg.domain.shared.port.unit_of_work import UnitOfWork
from datareg.domain.shared.service import Service

logger = logging.getLogger(__name__)

RegistryLock = NewType("RegistryLock", asyncio.Lock)
"""Process-wide critical section shared by every DatasetRegistry instance."""


def _check_page(limit: int | None, offset: int | None) -> None:
    if limit is not None and limit < 1:
        raise ValidationError("limit must be >= 1", field="limit")
    if offset is not None and offset < 0:
        raise ValidationError("offset must be >= 0", field="offset")


class DatasetRegistry(Service):
    """Registers dataset references and guards every change to them.

    Every mutation and every enumeration runs under ``lock`` and inside one
    ``uow`` transaction that commits before the lock is released, so no
    caller ever sees a half-applied change. Notifications go to the outbox in
    that same transaction; delivering them is a worker's job, not ours.

    ``actor`` is None for anonymous callers, who are never an owner.
    """

    datasets: DatasetRepository
    outbox: Outbox
    uow: UnitOfWork
    lock: RegistryLock

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def upload(
        self,
        actor: ActorId,
        dataset_ref: str,
        analysis_ref: str = "",
        is_public: bool = False,
    ) -> DatasetId:
        """Register a new dataset reference owned by actor.

        Returns:
            The newly assigned id (the number of datasets registered before it).

        Raises:
            ValidationError: If dataset_ref is empty.
            DuplicateReferenceError: If dataset_ref is already registered, by anyone.
        """
        if not dataset_ref:
            raise ValidationError("dataset_ref must not be empty", field="dataset_ref")

        async with self.lock:
            async with self.uow:
                if await self.datasets.ref_exists(dataset_ref):
                    raise DuplicateReferenceError(dataset_ref)

                dataset = Dataset(
                    id=DatasetId(await self.datasets.count()),
                    dataset_ref=dataset_ref,
                    analysis_ref=analysis_ref,
                    owner=actor,
                    is_public=is_public,
                    created_at=datetime.now(UTC),
                )
                await self.datasets.add(dataset)
                await self.outbox.append(
                    DatasetUploaded(
                        dataset_id=dataset.id,
                        owner=actor,
                        dataset_ref=dataset_ref,
                        analysis_ref=analysis_ref,
                        is_public=is_public,
                    )
                )

        logger.info("Dataset %d registered: ref=%s owner=%s", dataset.id, dataset_ref, actor)
        return dataset.id

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, actor: ActorId | None, dataset_id: DatasetId) -> Dataset:
        """Return a copy of one dataset if actor may see it.

        Raises:
            NotFoundError: If no dataset has this id.
            AccessDeniedError: If the dataset is private and actor is not its owner.
        """
        dataset = await self._require(dataset_id)
        if not CAN_READ.evaluate(actor, dataset):
            raise AccessDeniedError(f"Dataset {dataset_id} is private")
        return dataset

    async def list_public(
        self, *, limit: int | None = None, offset: int | None = None
    ) -> list[Dataset]:
        """All public datasets, ascending id. Private datasets never appear here."""
        _check_page(limit, offset)
        async with self.lock:
            return await self.datasets.list_public(limit=limit, offset=offset)

    async def list_owned_by(
        self, actor: ActorId, *, limit: int | None = None, offset: int | None = None
    ) -> list[Dataset]:
        """Every dataset actor registered, private ones included, in creation order."""
        _check_page(limit, offset)
        async with self.lock:
            return await self.datasets.list_by_owner(actor, limit=limit, offset=offset)

    async def count(self) -> int:
        """Total datasets ever registered, regardless of visibility."""
        async with self.lock:
            return await self.datasets.count()

    # -------------------------------------------------------------------------
    # Owner-gated mutation
    # -------------------------------------------------------------------------

    async def update_analysis(
        self, actor: ActorId, dataset_id: DatasetId, analysis_ref: str
    ) -> Dataset:
        """Replace the analysis reference. Only the owner may do this.

        Raises:
            NotFoundError: If no dataset has this id.
            NotOwnerError: If actor is not the owner.
        """
        async with self.lock:
            async with self.uow:
                dataset = await self._require_owned(actor, dataset_id)
                updated = dataset.with_analysis(analysis_ref)
                await self.datasets.update(updated)
                await self.outbox.append(
                    AnalysisUpdated(dataset_id=dataset_id, analysis_ref=analysis_ref)
                )

        logger.info("Dataset %d analysis updated by %s", dataset_id, actor)
        return updated

    async def set_visibility(
        self, actor: ActorId, dataset_id: DatasetId, is_public: bool
    ) -> Dataset:
        """Make a dataset public or private. Only the owner may do this.

        Raises:
            NotFoundError: If no dataset has this id.
            NotOwnerError: If actor is not the owner.
        """
        async with self.lock:
            async with self.uow:
                dataset = await self._require_owned(actor, dataset_id)
                updated = dataset.with_visibility(is_public)
                await self.datasets.update(updated)
                await self.outbox.append(
                    VisibilityChanged(dataset_id=dataset_id, is_public=is_public)
                )

        logger.info(
            "Dataset %d is now %s", dataset_id, "public" if is_public else "private"
        )
        return updated

    # -------------------------------------------------------------------------
    # Usage counters
    # -------------------------------------------------------------------------

    async def record_view(self, actor: ActorId | None, dataset_id: DatasetId) -> bool:
        return await self._record_usage(actor, dataset_id, UsageCounter.VIEWS)

    async def record_download(self, actor: ActorId | None, dataset_id: DatasetId) -> bool:
        return await self._record_usage(actor, dataset_id, UsageCounter.DOWNLOADS)

    async def record_citation(self, actor: ActorId | None, dataset_id: DatasetId) -> bool:
        return await self._record_usage(actor, dataset_id, UsageCounter.CITATIONS)

    async def _record_usage(
        self, actor: ActorId | None, dataset_id: DatasetId, counter: UsageCounter
    ) -> bool:
        """Increment counter if the dataset is public or actor owns it.

        An unauthorized call is a silent no-op: nothing changes, nothing is
        emitted, nothing is raised. Only an unknown id is an error.

        Returns:
            True if the counter was incremented.
        """
        async with self.lock:
            async with self.uow:
                dataset = await self._require(dataset_id)
                if not CAN_COUNT.evaluate(actor, dataset):
                    logger.debug(
                        "Ignoring %s on private dataset %d from non-owner", counter, dataset_id
                    )
                    return False
                await self.datasets.increment(dataset_id, counter)
                await self.outbox.append(USAGE_EVENTS[counter](dataset_id=dataset_id))
        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _require(self, dataset_id: DatasetId) -> Dataset:
        dataset = await self.datasets.get(dataset_id)
        if dataset is None:
            raise NotFoundError(f"Dataset not found: {dataset_id}")
        return dataset

    async def _require_owned(self, actor: ActorId, dataset_id: DatasetId) -> Dataset:
        dataset = await self._require(dataset_id)
        if not CAN_MUTATE.evaluate(actor, dataset):
            raise NotOwnerError(f"Dataset {dataset_id} is not owned by {actor}")
        return dataset
