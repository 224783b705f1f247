"""Dataset aggregate - one registry entry."""

from datetime import datetime

from pydantic import ConfigDict, Field

from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.shared.model.entity import Aggregate


class Dataset(Aggregate):
    """A registered dataset reference and its derived analysis.

    Instances are frozen: callers always hold a value copy, and the registry
    produces changed copies through the ``with_*`` methods before persisting.
    ``id``, ``dataset_ref``, ``owner`` and ``created_at`` have no such method.
    """

    model_config = ConfigDict(frozen=True)

    id: DatasetId = Field(ge=0)
    dataset_ref: str = Field(min_length=1)
    analysis_ref: str = ""
    owner: ActorId
    is_public: bool
    created_at: datetime
    views: int = Field(default=0, ge=0)
    downloads: int = Field(default=0, ge=0)
    citations: int = Field(default=0, ge=0)

    def is_owned_by(self, actor: ActorId | None) -> bool:
        return actor is not None and actor == self.owner

    def with_analysis(self, analysis_ref: str) -> "Dataset":
        return self.model_copy(update={"analysis_ref": analysis_ref})

    def with_visibility(self, is_public: bool) -> "Dataset":
        return self.model_copy(update={"is_public": is_public})

