from datareg.domain.dataset.event.changed import AnalysisUpdated, VisibilityChanged
from datareg.domain.dataset.event.uploaded import DatasetUploaded
from datareg.domain.dataset.event.usage import (
    USAGE_EVENTS,
    DatasetCited,
    DatasetDownloaded,
    DatasetViewed,
)

RegistryEvent = (
    DatasetUploaded
    | AnalysisUpdated
    | VisibilityChanged
    | DatasetViewed
    | DatasetDownloaded
    | DatasetCited
)

__all__ = [
    "USAGE_EVENTS",
    "AnalysisUpdated",
    "DatasetCited",
    "DatasetDownloaded",
    "DatasetUploaded",
    "DatasetViewed",
    "RegistryEvent",
    "VisibilityChanged",
]
