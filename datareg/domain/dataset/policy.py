"""Who may do what to a dataset."""

from dataclasses import dataclass

from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.aggregate import Dataset
from datareg.domain.shared.authorization.policy import Policy


@dataclass(frozen=True)
class IsOwner(Policy):
    def evaluate(self, actor: ActorId | None, resource: Dataset) -> bool:
        return resource.is_owned_by(actor)


@dataclass(frozen=True)
class IsPublic(Policy):
    def evaluate(self, actor: ActorId | None, resource: Dataset) -> bool:
        return resource.is_public


# Reading a dataset and having a counter increment honored share one rule.
# Counting is not rate limited: any actor may bump a public dataset's counters.
CAN_READ: Policy = IsPublic() | IsOwner()
CAN_COUNT: Policy = IsPublic() | IsOwner()
CAN_MUTATE: Policy = IsOwner()
