"""DatasetRepository port - persistence interface for the registry state."""

from abc import abstractmethod
from typing import Protocol

from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.aggregate import Dataset
from datareg.domain.dataset.model.value import DatasetId, UsageCounter


class DatasetRepository(Protocol):
    """Storage for datasets plus the two secondary indices.

    The reference index (every accepted ``dataset_ref``) and the owner index
    (ids per actor, in creation order) are part of the same rows, so they can
    never drift from the records themselves. Rows are never deleted.
    """

    @abstractmethod
    async def add(self, dataset: Dataset) -> None:
        """Insert a new dataset.

        Raises:
            DuplicateReferenceError: If dataset_ref is already stored.
            ConflictError: If the id is already taken.
        """
        ...

    @abstractmethod
    async def get(self, dataset_id: DatasetId) -> Dataset | None: ...

    @abstractmethod
    async def ref_exists(self, dataset_ref: str) -> bool: ...

    @abstractmethod
    async def update(self, dataset: Dataset) -> None:
        """Persist the owner-mutable fields (analysis_ref, is_public) only."""
        ...

    @abstractmethod
    async def increment(self, dataset_id: DatasetId, counter: UsageCounter) -> None:
        """Add one to a usage counter in a single atomic statement."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Number of datasets ever stored, which is also the next id to assign."""
        ...

    @abstractmethod
    async def list_public(
        self, *, limit: int | None = None, offset: int | None = None
    ) -> list[Dataset]:
        """Public datasets in ascending id order."""
        ...

    @abstractmethod
    async def list_by_owner(
        self, owner: ActorId, *, limit: int | None = None, offset: int | None = None
    ) -> list[Dataset]:
        """All of owner's datasets, private included, in creation order."""
        ...
