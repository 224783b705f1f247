"""Resource policies.

A policy answers one yes/no question about an actor and a loaded resource.
Policies never raise; the service decides which error a failed check maps to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from datareg.domain.auth.model.value import ActorId


class Policy(ABC):
    """Base class for authorization policies. ``a | b`` passes if either does."""

    @abstractmethod
    def evaluate(self, actor: ActorId | None, resource: Any) -> bool:
        """Return True if actor may act on resource."""
        ...

    def __or__(self, other: Policy) -> AnyOf:
        return AnyOf(policies=(self, other))


@dataclass(frozen=True)
class AnyOf(Policy):
    """Policy that requires at least ONE sub-policy to pass."""

    policies: tuple[Policy, ...]

    def evaluate(self, actor: ActorId | None, resource: Any) -> bool:
        return any(p.evaluate(actor, resource) for p in self.policies)
