"""SQLAlchemy adapter implementing EventRepository."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import pydantic
from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from datareg.domain.shared.event import ClaimResult, Event, EventId
from datareg.domain.shared.port.event_repository import EventRepository
from datareg.infrastructure.persistence.tables import deliveries_table, events_table

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 30


def retry_backoff(retry_count: int) -> timedelta:
    """Delay before a failed delivery may be claimed again: min(30, 5^retry_count) seconds."""
    return timedelta(seconds=min(MAX_BACKOFF_SECONDS, 5**retry_count))


class SQLAlchemyEventRepository(EventRepository):
    """SQLAlchemy-backed event repository.

    Events are stored in an append-only log ordered by ``seq``. Delivery
    tracking uses a separate deliveries table with one row per
    (event, consumer_group) pair, and that pair is how deliveries are addressed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_with_deliveries(self, event: Event, consumer_groups: set[str]) -> None:
        """Save event to append-only log and create delivery rows."""
        now = datetime.now(UTC)

        await self._session.execute(
            insert(events_table).values(
                id=str(event.id),
                event_type=type(event).__name__,
                payload=event.model_dump(mode="json"),
                created_at=event.created_at,
            )
        )

        for group in sorted(consumer_groups):
            await self._session.execute(
                insert(deliveries_table).values(
                    id=str(uuid4()),
                    event_id=str(event.id),
                    consumer_group=group,
                    status="pending",
                    retry_count=0,
                    updated_at=now,
                )
            )

    async def get(self, event_id: EventId) -> Event | None:
        stmt = select(events_table.c.event_type, events_table.c.payload).where(
            events_table.c.id == str(event_id)
        )
        row = (await self._session.execute(stmt)).first()
        if row is None:
            return None
        event_type, payload = row
        return self._deserialize(event_type, payload)

    async def list_events(
        self,
        limit: int = 50,
        after: EventId | None = None,
        event_types: list[str] | None = None,
        newest_first: bool = False,
    ) -> list[Event]:
        """List events with cursor-based pagination, in commit order."""
        stmt = select(events_table.c.event_type, events_table.c.payload)

        if newest_first:
            stmt = stmt.order_by(events_table.c.seq.desc())
        else:
            stmt = stmt.order_by(events_table.c.seq.asc())

        if after is not None:
            cursor_stmt = select(events_table.c.seq).where(events_table.c.id == str(after))
            cursor_seq = (await self._session.execute(cursor_stmt)).scalar()
            if cursor_seq is not None:
                if newest_first:
                    stmt = stmt.where(events_table.c.seq < cursor_seq)
                else:
                    stmt = stmt.where(events_table.c.seq > cursor_seq)

        if event_types:
            stmt = stmt.where(events_table.c.event_type.in_(event_types))

        result = await self._session.execute(stmt.limit(limit))

        events: list[Event] = []
        for event_type, payload in result.fetchall():
            event = self._deserialize(event_type, payload)
            if event is not None:
                events.append(event)
        return events

    async def count(self, event_types: list[str] | None = None) -> int:
        stmt = select(func.count()).select_from(events_table)
        if event_types:
            stmt = stmt.where(events_table.c.event_type.in_(event_types))
        return (await self._session.execute(stmt)).scalar() or 0

    async def claim_delivery(
        self,
        consumer_group: str,
        event_types: list[str],
        limit: int = 1,
    ) -> ClaimResult:
        """Claim pending deliveries for a specific consumer group.

        Deliveries are handed out strictly in ``seq`` order. The earliest delivery
        that is still claimed or waiting out its retry backoff blocks every later
        one in the group, so a retried event is never overtaken. Exhausted
        (failed) deliveries no longer block.

        Uses FOR UPDATE SKIP LOCKED on PostgreSQL; SQLite ignores the clause
        and relies on its single-writer lock instead.
        """
        now = datetime.now(UTC)

        blocker_stmt = (
            select(func.min(events_table.c.seq))
            .join(deliveries_table, deliveries_table.c.event_id == events_table.c.id)
            .where(
                deliveries_table.c.consumer_group == consumer_group,
                events_table.c.event_type.in_(event_types),
                or_(
                    deliveries_table.c.status == "claimed",
                    and_(
                        deliveries_table.c.status == "pending",
                        deliveries_table.c.available_at > now,
                    ),
                ),
            )
        )
        blocker_seq = (await self._session.execute(blocker_stmt)).scalar()

        stmt = (
            select(deliveries_table.c.id, events_table.c.event_type, events_table.c.payload)
            .join(events_table, deliveries_table.c.event_id == events_table.c.id)
            .where(
                deliveries_table.c.consumer_group == consumer_group,
                deliveries_table.c.status == "pending",
                events_table.c.event_type.in_(event_types),
                or_(
                    deliveries_table.c.available_at.is_(None),
                    deliveries_table.c.available_at <= now,
                ),
            )
            .order_by(events_table.c.seq.asc())
            .limit(limit)
            .with_for_update(skip_locked=True, of=deliveries_table)
        )
        if blocker_seq is not None:
            stmt = stmt.where(events_table.c.seq < blocker_seq)
        rows = (await self._session.execute(stmt)).fetchall()

        if not rows:
            return ClaimResult(events=[], claimed_at=now)

        await self._session.execute(
            update(deliveries_table)
            .where(deliveries_table.c.id.in_([row[0] for row in rows]))
            .values(status="claimed", claimed_at=now, updated_at=now)
        )

        events: list[Event] = []
        for _, event_type, payload in rows:
            event = self._deserialize(event_type, payload)
            if event is not None:
                events.append(event)
        return ClaimResult(events=events, claimed_at=now)

    async def mark_delivery_status(
        self,
        event_id: EventId,
        consumer_group: str,
        status: str,
        error: str | None = None,
    ) -> None:
        now = datetime.now(UTC)
        values: dict[str, Any] = {"status": status, "updated_at": now}
        if status == "delivered":
            values["delivered_at"] = now
        if error is not None:
            values["delivery_error"] = error

        await self._session.execute(
            update(deliveries_table)
            .where(
                deliveries_table.c.event_id == str(event_id),
                deliveries_table.c.consumer_group == consumer_group,
            )
            .values(**values)
        )

    async def reset_stale_deliveries(self, timeout_seconds: float) -> int:
        """Reset deliveries that have been claimed for too long."""
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=timeout_seconds)

        result = await self._session.execute(
            update(deliveries_table)
            .where(
                deliveries_table.c.status == "claimed",
                deliveries_table.c.claimed_at < cutoff,
            )
            .values(status="pending", claimed_at=None, updated_at=now)
        )
        count = result.rowcount
        if count > 0:
            logger.info(f"Reset {count} stale deliveries (older than {timeout_seconds}s)")
        return count

    async def mark_failed_with_retry(
        self,
        event_id: EventId,
        consumer_group: str,
        error: str,
        max_retries: int,
    ) -> None:
        now = datetime.now(UTC)
        where = (
            deliveries_table.c.event_id == str(event_id),
            deliveries_table.c.consumer_group == consumer_group,
        )

        row = (
            await self._session.execute(select(deliveries_table.c.retry_count).where(*where))
        ).first()
        if row is None:
            logger.warning(
                f"Delivery {event_id}/{consumer_group} not found for mark_failed_with_retry"
            )
            return

        retry_count = (row[0] or 0) + 1

        if retry_count >= max_retries:
            values: dict[str, Any] = {"status": "failed", "delivered_at": now}
        else:
            values = {
                "status": "pending",
                "claimed_at": None,
                "available_at": now + retry_backoff(retry_count),
            }

        await self._session.execute(
            update(deliveries_table)
            .where(*where)
            .values(delivery_error=error, retry_count=retry_count, updated_at=now, **values)
        )

    def _deserialize(self, event_type: str, payload: dict | str) -> Event | None:
        event_cls = Event._registry.get(event_type)
        if event_cls is None:
            logger.warning(f"Unknown event type '{event_type}' - skipping")
            return None

        try:
            if isinstance(payload, str):
                return event_cls.model_validate_json(payload)
            return event_cls.model_validate(payload)
        except pydantic.ValidationError as e:
            logger.error(f"Failed to deserialize event type '{event_type}': {e}")
            return None
