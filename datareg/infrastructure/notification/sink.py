"""NotificationSink adapters: a log line, or an HTTP POST per subscriber."""

import logging

import httpx

from datareg.domain.shared.error import ExternalServiceError
from datareg.domain.shared.event import Event

logger = logging.getLogger(__name__)


def event_envelope(event: Event) -> dict:
    """The JSON body observers receive. Same shape as the /events changefeed."""
    return {
        "type": type(event).__name__,
        "id": str(event.id),
        "created_at": event.created_at.isoformat(),
        "data": event.model_dump(mode="json", exclude={"id", "created_at"}),
    }


class LoggingNotificationSink:
    """Writes one log line per notification. The default when no webhook is set."""

    async def deliver(self, event: Event) -> None:
        envelope = event_envelope(event)
        logger.info("Notification %s %s", envelope["type"], envelope["data"])


class WebhookNotificationSink:
    """POSTs every notification to each configured URL.

    Any transport error or non-2xx answer raises ExternalServiceError, which
    makes the worker retry the whole delivery. Receivers should therefore
    deduplicate on ``id``.
    """

    def __init__(self, client: httpx.AsyncClient, urls: list[str]) -> None:
        self._client = client
        self._urls = urls

    async def deliver(self, event: Event) -> None:
        envelope = event_envelope(event)
        for url in self._urls:
            try:
                response = await self._client.post(url, json=envelope)
            except httpx.HTTPError as e:
                raise ExternalServiceError(f"Webhook {url} unreachable: {e}") from e
            if not response.is_success:
                raise ExternalServiceError(
                    f"Webhook {url} rejected {envelope['type']}: HTTP {response.status_code}"
                )
            logger.debug(f"Delivered {envelope['type']} {envelope['id']} to {url}")
