"""Usage notifications, one per honored counter increment."""

from datareg.domain.dataset.model.value import DatasetId, UsageCounter
from datareg.domain.shared.event import Event


class DatasetViewed(Event):
    dataset_id: DatasetId


class DatasetDownloaded(Event):
    dataset_id: DatasetId


class DatasetCited(Event):
    dataset_id: DatasetId


USAGE_EVENTS: dict[UsageCounter, type[Event]] = {
    UsageCounter.VIEWS: DatasetViewed,
    UsageCounter.DOWNLOADS: DatasetDownloaded,
    UsageCounter.CITATIONS: DatasetCited,
}
