"""Outbox - domain service for reliable event delivery."""

from datareg.domain.shared.event import ClaimResult, Event, EventId
from datareg.domain.shared.model.subscription_registry import SubscriptionRegistry
from datareg.domain.shared.port.event_repository import EventRepository
from datareg.domain.shared.service import Service


class Outbox(Service):
    """Domain service for reliable event delivery via the transactional outbox pattern.

    append() runs inside the caller's transaction, so a notification is stored
    if and only if the state change that produced it commits. Delivery happens
    later, when a worker claims the row for its consumer group.
    """

    _repo: EventRepository
    _registry: SubscriptionRegistry

    async def append(self, event: Event) -> None:
        """Add an event to the outbox for delivery.

        Creates one delivery row per consumer group subscribed to this event type.
        If no groups are subscribed, the event is saved as audit-only.
        """
        consumer_groups = self._registry.get(type(event).__name__, set())
        await self._repo.save_with_deliveries(event, consumer_groups=consumer_groups)

    async def claim(
        self,
        event_types: list[type[Event]],
        limit: int,
        consumer_group: str,
    ) -> ClaimResult:
        """Claim pending deliveries for a specific consumer group."""
        event_type_names = [et.__name__ for et in event_types]
        return await self._repo.claim_delivery(
            consumer_group=consumer_group,
            event_types=event_type_names,
            limit=limit,
        )

    async def mark_delivered(self, event_id: EventId, consumer_group: str) -> None:
        await self._repo.mark_delivery_status(event_id, consumer_group, status="delivered")

    async def mark_failed(self, event_id: EventId, consumer_group: str, error: str) -> None:
        await self._repo.mark_delivery_status(
            event_id, consumer_group, status="failed", error=error
        )

    async def mark_failed_with_retry(
        self,
        event_id: EventId,
        consumer_group: str,
        error: str,
        max_retries: int,
    ) -> None:
        """Mark a delivery as failed, going back to pending while retries remain."""
        await self._repo.mark_failed_with_retry(
            event_id, consumer_group, error=error, max_retries=max_retries
        )

    async def reset_stale_claims(self, timeout_seconds: float) -> int:
        """Reset deliveries that have been claimed for too long (crashed workers)."""
        return await self._repo.reset_stale_deliveries(timeout_seconds)
