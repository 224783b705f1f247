"""EventRepository port - pure CRUD for event persistence."""

from typing import Protocol

from datareg.domain.shared.event import ClaimResult, Event, EventId


class EventRepository(Protocol):
    """Repository for domain events - pure data access.

    Events are stored in an append-only log. Delivery tracking is handled
    via a separate deliveries table, one row per (event, consumer_group) pair.
    """

    async def save_with_deliveries(self, event: Event, consumer_groups: set[str]) -> None:
        """Save event to the append-only log and create delivery rows.

        Args:
            event: The event to persist.
            consumer_groups: Consumer group names to create deliveries for.
                If empty, the event is saved without any delivery rows (audit-only).
        """
        ...

    async def get(self, event_id: EventId) -> Event | None:
        """Get an event by ID."""
        ...

    async def list_events(
        self,
        limit: int = 50,
        after: EventId | None = None,
        event_types: list[str] | None = None,
        newest_first: bool = False,
    ) -> list[Event]:
        """List events with cursor-based pagination.

        Args:
            limit: Maximum number of events to return.
            after: Cursor - return events after this event ID.
            event_types: Filter by event type names (e.g., ["DatasetUploaded"]).
            newest_first: If True, return newest events first.
        """
        ...

    async def count(self, event_types: list[str] | None = None) -> int:
        """Count events, optionally filtered by types."""
        ...

    async def claim_delivery(
        self,
        consumer_group: str,
        event_types: list[str],
        limit: int = 1,
    ) -> ClaimResult:
        """Claim pending deliveries for a specific consumer group.

        Selects and locks delivery rows (FOR UPDATE SKIP LOCKED where the
        dialect supports it) and returns the joined event payloads.
        """
        ...

    async def mark_delivery_status(
        self,
        event_id: EventId,
        consumer_group: str,
        status: str,
        error: str | None = None,
    ) -> None:
        """Set the status of one (event, consumer_group) delivery."""
        ...

    async def reset_stale_deliveries(self, timeout_seconds: float) -> int:
        """Return deliveries claimed longer than timeout_seconds to 'pending'.

        Returns:
            Number of deliveries reset.
        """
        ...

    async def mark_failed_with_retry(
        self,
        event_id: EventId,
        consumer_group: str,
        error: str,
        max_retries: int,
    ) -> None:
        """Mark a delivery as failed with retry logic.

        If the incremented retry_count is below max_retries the delivery goes
        back to 'pending'; otherwise it is marked 'failed' permanently.
        """
        ...
