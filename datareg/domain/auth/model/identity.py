"""Identity hierarchy: base types for all request identities."""

from dataclasses import dataclass

from datareg.domain.auth.model.value import ActorId


@dataclass(frozen=True)
class Identity:
    """Base for all request identities."""


@dataclass(frozen=True)
class Anonymous(Identity):
    """Request without an actor header. Treated as a non-owner everywhere."""


@dataclass(frozen=True)
class System(Identity):
    """Internal worker/background process."""


@dataclass(frozen=True)
class Actor(Identity):
    """Authenticated caller, as vouched for by the upstream identity provider."""

    actor_id: ActorId


def actor_id_of(identity: Identity) -> ActorId | None:
    """Return the actor id behind an identity, or None when there is none."""
    if isinstance(identity, Actor):
        return identity.actor_id
    return None
