from sqlalchemy.ext.asyncio import AsyncSession

from datareg.domain.shared.port.unit_of_work import UnitOfWork


class SQLAlchemyUnitOfWork(UnitOfWork):
    """UnitOfWork over the request's AsyncSession.

    Repositories in the same scope share this session, so everything they
    execute between enter and exit lands in one transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
