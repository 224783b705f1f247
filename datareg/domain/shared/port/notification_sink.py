from typing import Protocol

from datareg.domain.shared.event import Event


class NotificationSink(Protocol):
    """Where committed notifications end up (subscribers, audit log, webhooks).

    Called from background workers, never from inside a registry transaction.
    Raising makes the worker retry the delivery later.
    """

    async def deliver(self, event: Event) -> None: ...
