from datetime import UTC, datetime
from unittest.mock import AsyncMock
from uuid import uuid4

from datareg.domain.dataset.event import DatasetCited, DatasetViewed
from datareg.domain.shared.event import ClaimResult, EventId
from datareg.domain.shared.model.subscription_registry import SubscriptionRegistry
from datareg.domain.shared.outbox import Outbox


def _outbox(repo: AsyncMock, groups: dict[str, set[str]] | None = None) -> Outbox:
    return Outbox(repo, SubscriptionRegistry(groups or {}))


async def test_append_creates_delivery_per_subscribed_group():
    repo = AsyncMock()
    outbox = _outbox(repo, {"DatasetViewed": {"ForwardRegistryNotifications", "Audit"}})
    event = DatasetViewed(dataset_id=0)

    await outbox.append(event)

    repo.save_with_deliveries.assert_called_once_with(
        event, consumer_groups={"ForwardRegistryNotifications", "Audit"}
    )


async def test_append_unsubscribed_event_is_audit_only():
    repo = AsyncMock()
    outbox = _outbox(repo)

    await outbox.append(DatasetCited(dataset_id=0))

    assert repo.save_with_deliveries.call_args.kwargs["consumer_groups"] == set()


async def test_claim_passes_type_names():
    repo = AsyncMock()
    repo.claim_delivery.return_value = ClaimResult(events=[], claimed_at=datetime.now(UTC))
    outbox = _outbox(repo)

    result = await outbox.claim(
        [DatasetViewed, DatasetCited], limit=5, consumer_group="ForwardRegistryNotifications"
    )

    assert not result
    repo.claim_delivery.assert_called_once_with(
        consumer_group="ForwardRegistryNotifications",
        event_types=["DatasetViewed", "DatasetCited"],
        limit=5,
    )


async def test_mark_delivered_and_failed():
    repo = AsyncMock()
    outbox = _outbox(repo)
    event_id = EventId(uuid4())

    await outbox.mark_delivered(event_id, "G")
    await outbox.mark_failed(event_id, "G", "boom")

    repo.mark_delivery_status.assert_any_call(event_id, "G", status="delivered")
    repo.mark_delivery_status.assert_any_call(event_id, "G", status="failed", error="boom")


async def test_mark_failed_with_retry_and_reset():
    repo = AsyncMock()
    repo.reset_stale_deliveries.return_value = 2
    outbox = _outbox(repo)
    event_id = EventId(uuid4())

    await outbox.mark_failed_with_retry(event_id, "G", "timeout", max_retries=3)

    repo.mark_failed_with_retry.assert_called_once_with(
        event_id, "G", error="timeout", max_retries=3
    )
    assert await outbox.reset_stale_claims(60.0) == 2
