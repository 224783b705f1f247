"""Forward committed registry events to the configured notification sink."""

import logging

from datareg.domain.dataset.event import RegistryEvent
from datareg.domain.shared.event import EventHandler
from datareg.domain.shared.port.notification_sink import NotificationSink

logger = logging.getLogger(__name__)


class ForwardRegistryNotifications(EventHandler[RegistryEvent]):
    """Hands every registry event to the sink, one at a time, in commit order.

    All dataset events share this single consumer group. A delivery that is
    waiting for a retry holds back everything committed after it, so
    observers never see a later change before an earlier one. Events only
    reach the outbox once their transaction commits, so observers never learn
    of a change that was rolled back.
    """

    _sink: NotificationSink

    async def handle(self, event: RegistryEvent) -> None:
        await self._sink.deliver(event)
        logger.debug(f"Delivered {type(event).__name__} {event.id}")
