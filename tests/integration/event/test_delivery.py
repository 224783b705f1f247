"""Registry notifications delivered through the worker to a webhook."""

import json
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from dishka import AsyncContainer, from_context, make_async_container
from sqlalchemy import select, update

from datareg.config import Config, DatabaseConfig, NotificationConfig
from datareg.domain.auth.model.value import ActorId
from datareg.domain.auth.util.di.provider import AuthProvider
from datareg.domain.dataset.handler import ForwardRegistryNotifications
from datareg.domain.dataset.service.registry import DatasetRegistry
from datareg.domain.dataset.util.di.provider import DatasetProvider
from datareg.infrastructure.event.di import EventProvider
from datareg.infrastructure.event.worker import Worker
from datareg.infrastructure.notification.di import NotificationProvider
from datareg.infrastructure.persistence.di import PersistenceProvider
from datareg.infrastructure.persistence.tables import deliveries_table, events_table
from datareg.util.di.base import Provider
from datareg.util.di.scope import Scope

pytestmark = pytest.mark.integration

ALICE = ActorId("alice")
BOB = ActorId("bob")
HOOK = "http://hooks.test/datareg"

Hook = Callable[[httpx.Request], httpx.Response]


class MockTransportProvider(Provider):
    client = from_context(provides=httpx.AsyncClient, scope=Scope.APP)


@pytest.fixture
async def make_container(
    engine, database_url: str
) -> AsyncIterator[Callable[[Hook], AsyncContainer]]:
    """Real providers, with the webhook client answered by a local hook function."""
    opened: list[tuple[AsyncContainer, httpx.AsyncClient]] = []

    def _make(hook: Hook) -> AsyncContainer:
        config = Config(
            database=DatabaseConfig(url=database_url, auto_migrate=False),
            notifications=NotificationConfig(sink="webhook", webhook_urls=[HOOK]),
        )
        client = httpx.AsyncClient(transport=httpx.MockTransport(hook))
        container = make_async_container(
            PersistenceProvider(),
            EventProvider(),
            NotificationProvider(),
            DatasetProvider(),
            AuthProvider(),
            MockTransportProvider(),
            context={Config: config, httpx.AsyncClient: client},
            scopes=Scope,  # type: ignore[arg-type]
        )
        opened.append((container, client))
        return container

    yield _make

    for container, client in opened:
        await container.close()
        await client.aclose()


async def _drain(worker: Worker) -> None:
    while await worker._poll_once():
        pass


async def _delivery_rows(session_factory) -> list[dict]:
    async with session_factory() as session:
        rows = await session.execute(
            select(events_table.c.event_type, deliveries_table)
            .join(events_table, deliveries_table.c.event_id == events_table.c.id)
            .order_by(events_table.c.seq)
        )
        return [dict(row) for row in rows.mappings()]


async def _end_backoff(session_factory) -> None:
    async with session_factory() as session:
        await session.execute(
            update(deliveries_table)
            .where(deliveries_table.c.available_at.is_not(None))
            .values(available_at=datetime.now(UTC) - timedelta(seconds=1))
        )
        await session.commit()


async def test_sink_receives_notifications_in_the_order_they_occur(make_container):
    received: list[str] = []

    def hook(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content)["type"])
        return httpx.Response(204)

    container = make_container(hook)
    async with container(scope=Scope.UOW) as scope:
        registry = await scope.get(DatasetRegistry)
        dataset_id = await registry.upload(ALICE, "bafy-data")
        await registry.set_visibility(ALICE, dataset_id, True)
        assert await registry.record_view(BOB, dataset_id)

    worker = Worker(ForwardRegistryNotifications)
    worker.set_container(container)
    await _drain(worker)

    assert received == ["DatasetUploaded", "VisibilityChanged", "DatasetViewed"]


async def test_retried_notification_is_not_overtaken(make_container, session_factory):
    received: list[str] = []

    def hook(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content)["type"])
        return httpx.Response(500 if len(received) == 1 else 204)

    container = make_container(hook)
    async with container(scope=Scope.UOW) as scope:
        registry = await scope.get(DatasetRegistry)
        dataset_id = await registry.upload(ALICE, "bafy-data")
        await registry.set_visibility(ALICE, dataset_id, True)

    worker = Worker(ForwardRegistryNotifications)
    worker.set_container(container)

    assert await worker._poll_once() is True
    assert await worker._poll_once() is False
    assert received == ["DatasetUploaded"]

    await _end_backoff(session_factory)
    await _drain(worker)

    assert received == ["DatasetUploaded", "DatasetUploaded", "VisibilityChanged"]
    assert [row["status"] for row in await _delivery_rows(session_factory)] == [
        "delivered",
        "delivered",
    ]


async def test_webhook_failure_keeps_state_and_schedules_retry(make_container, session_factory):
    def hook(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    container = make_container(hook)
    async with container(scope=Scope.UOW) as scope:
        registry = await scope.get(DatasetRegistry)
        dataset_id = await registry.upload(ALICE, "bafy-data")
        assert await registry.record_view(ALICE, dataset_id)

    worker = Worker(ForwardRegistryNotifications)
    worker.set_container(container)
    assert await worker._poll_once() is True

    async with container(scope=Scope.UOW) as scope:
        dataset = await (await scope.get(DatasetRegistry)).get(ALICE, dataset_id)
    assert dataset.dataset_ref == "bafy-data"
    assert dataset.views == 1

    uploaded, viewed = await _delivery_rows(session_factory)
    assert uploaded["event_type"] == "DatasetUploaded"
    assert uploaded["status"] == "pending"
    assert uploaded["retry_count"] == 1
    assert "HTTP 500" in uploaded["delivery_error"]
    assert uploaded["available_at"] is not None
    assert viewed["status"] == "pending"
    assert viewed["retry_count"] == 0
    assert worker.state.failed_count == 1


async def test_webhook_failure_marks_delivery_failed_after_retries(
    make_container, session_factory
):
    def hook(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    container = make_container(hook)
    async with container(scope=Scope.UOW) as scope:
        await (await scope.get(DatasetRegistry)).upload(ALICE, "bafy-data")

    worker = Worker(ForwardRegistryNotifications)
    worker.set_container(container)
    for _ in range(ForwardRegistryNotifications.__max_retries__):
        assert await worker._poll_once() is True
        await _end_backoff(session_factory)

    (row,) = await _delivery_rows(session_factory)
    assert row["status"] == "failed"
    assert row["retry_count"] == ForwardRegistryNotifications.__max_retries__
    assert await worker._poll_once() is False

    async with container(scope=Scope.UOW) as scope:
        assert await (await scope.get(DatasetRegistry)).count() == 1
