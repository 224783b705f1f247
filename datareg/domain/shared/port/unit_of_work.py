from abc import ABC, abstractmethod
from types import TracebackType


class UnitOfWork(ABC):
    """Transaction boundary for one logical registry operation.

    Used as ``async with uow:``. Leaving the block normally commits; leaving it
    with an exception rolls back and re-raises, so a failed operation leaves
    no partial effects behind.
    """

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is not None:
            await self.rollback()
        else:
            await self.commit()
