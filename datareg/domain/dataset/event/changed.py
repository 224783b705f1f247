"""Owner-initiated changes to a registered dataset."""

from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.shared.event import Event


class AnalysisUpdated(Event):
    dataset_id: DatasetId
    analysis_ref: str


class VisibilityChanged(Event):
    dataset_id: DatasetId
    is_public: bool
