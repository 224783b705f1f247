from typing import AsyncIterable

import httpx
from dishka import provide

from datareg.config import Config
from datareg.domain.shared.port.notification_sink import NotificationSink
from datareg.infrastructure.notification.sink import (
    LoggingNotificationSink,
    WebhookNotificationSink,
)
from datareg.util.di.base import Provider
from datareg.util.di.scope import Scope


class NotificationProvider(Provider):
    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        async with httpx.AsyncClient(timeout=config.notifications.timeout) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_sink(self, config: Config, client: httpx.AsyncClient) -> NotificationSink:
        if config.notifications.sink == "webhook":
            return WebhookNotificationSink(client, config.notifications.webhook_urls)
        return LoggingNotificationSink()
