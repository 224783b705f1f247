"""Changefeed of committed registry notifications.

Every notification the registry emits is also kept in the event log, so an
observer that missed webhook deliveries can catch up from here. Entries come
back in commit order.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query
from pydantic import BaseModel

from datareg.domain.shared.error import NotFoundError
from datareg.domain.shared.event import EventId
from datareg.domain.shared.event_log import EventLog
from datareg.infrastructure.notification.sink import event_envelope

router = APIRouter(prefix="/events", tags=["events"], route_class=DishkaRoute)


class EventResponse(BaseModel):
    id: UUID
    type: str
    created_at: datetime
    data: dict[str, Any]


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    cursor: str | None
    has_more: bool


@router.get("")
async def list_events(
    event_log: FromDishka[EventLog],
    limit: int = Query(50, ge=1, le=500, description="Maximum number of events"),
    after: UUID | None = Query(None, description="Cursor: return events after this ID"),
    types: list[str] | None = Query(None, description="Filter by event type names"),
    order: Literal["asc", "desc"] = Query("asc", description="'asc' oldest first, 'desc' newest first"),
) -> EventListResponse:
    # One extra row tells us whether another page exists
    events = await event_log.list_events(
        limit=limit + 1,
        after=EventId(after) if after else None,
        event_types=types,
        newest_first=order == "desc",
    )
    has_more = len(events) > limit
    events = events[:limit]

    return EventListResponse(
        events=[EventResponse.model_validate(event_envelope(e)) for e in events],
        total=await event_log.count(event_types=types),
        cursor=str(events[-1].id) if events else None,
        has_more=has_more,
    )


@router.get("/{event_id}")
async def get_event(event_id: UUID, event_log: FromDishka[EventLog]) -> EventResponse:
    event = await event_log.get(EventId(event_id))
    if event is None:
        raise NotFoundError(f"Event not found: {event_id}")
    return EventResponse.model_validate(event_envelope(event))
