"""Dependency injection provider for the event system."""

import logging
from typing import Any, NewType

from dishka import AsyncContainer, provide

from datareg.config import Config
from datareg.domain.dataset.handler import ForwardRegistryNotifications
from datareg.domain.shared.event import EventHandler
from datareg.domain.shared.event_log import EventLog
from datareg.domain.shared.model.subscription_registry import SubscriptionRegistry
from datareg.domain.shared.outbox import Outbox
from datareg.domain.shared.port.event_repository import EventRepository
from datareg.infrastructure.event.worker import WorkerPool
from datareg.util.di.base import Provider
from datareg.util.di.scope import Scope

logger = logging.getLogger(__name__)

HandlerTypes = NewType("HandlerTypes", list[type[EventHandler[Any]]])

# All event handlers for WorkerPool registration
HANDLERS: HandlerTypes = HandlerTypes([ForwardRegistryNotifications])


def build_subscription_registry(handlers: HandlerTypes) -> SubscriptionRegistry:
    """Map each name in a handler's __event_types__ to the handler names consuming it."""
    registry: dict[str, set[str]] = {}
    for handler in handlers:
        for event_type in handler.__event_types__:
            registry.setdefault(event_type.__name__, set()).add(handler.__name__)
    return SubscriptionRegistry(registry)


class EventProvider(Provider):
    """Provides event system components.

    Handlers and Outbox are UOW-scoped (fresh per unit of work).
    WorkerPool and SubscriptionRegistry are APP-scoped singletons.
    """

    @provide(scope=Scope.UOW)
    def get_outbox(self, repo: EventRepository, registry: SubscriptionRegistry) -> Outbox:
        return Outbox(repo, registry)

    @provide(scope=Scope.UOW)
    def get_event_log(self, repo: EventRepository) -> EventLog:
        return EventLog(repo)

    for _handler_type in HANDLERS:
        locals()[_handler_type.__name__] = provide(_handler_type, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_handler_types(self) -> HandlerTypes:
        return HANDLERS

    @provide(scope=Scope.APP)
    def get_subscription_registry(self, handler_types: HandlerTypes) -> SubscriptionRegistry:
        registry = build_subscription_registry(handler_types)
        logger.info(
            f"Built subscription registry: {len(registry)} event types, "
            f"{sum(len(v) for v in registry.values())} consumer groups"
        )
        return registry

    @provide(scope=Scope.APP)
    def get_worker_pool(
        self,
        container: AsyncContainer,
        handler_types: HandlerTypes,
        config: Config,
    ) -> WorkerPool:
        pool = WorkerPool(
            container=container,
            stale_claim_interval=config.worker.stale_claim_interval,
            poll_interval=config.worker.poll_interval,
        )
        for handler_type in handler_types:
            pool.register(handler_type)

        logger.info(f"WorkerPool created with {len(pool.workers)} workers")
        return pool
