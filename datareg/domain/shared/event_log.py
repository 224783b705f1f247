"""EventLog - read side of the notification log (changefeed)."""

from datareg.domain.shared.event import Event, EventId
from datareg.domain.shared.port.event_repository import EventRepository
from datareg.domain.shared.service import Service


class EventLog(Service):
    """Lists stored notifications in the order they were committed."""

    _repo: EventRepository

    async def list_events(
        self,
        limit: int = 50,
        after: EventId | None = None,
        event_types: list[str] | None = None,
        newest_first: bool = False,
    ) -> list[Event]:
        return await self._repo.list_events(
            limit=limit, after=after, event_types=event_types, newest_first=newest_first
        )

    async def count(self, event_types: list[str] | None = None) -> int:
        return await self._repo.count(event_types=event_types)

    async def get(self, event_id: EventId) -> Event | None:
        return await self._repo.get(event_id)
