from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.shared.event import Event


class DatasetUploaded(Event):
    """Emitted when a new dataset reference is registered."""

    dataset_id: DatasetId
    owner: ActorId
    dataset_ref: str
    analysis_ref: str
    is_public: bool
