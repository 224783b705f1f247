"""Handler-level authorization gates: public() and authenticated()."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("datareg.authz")


class Gate:
    """Base for handler-level authorization gates.

    Every CommandHandler/QueryHandler must declare ``__auth__: ClassVar[Gate]``.
    Gates run before the handler body; resource-level checks (ownership,
    visibility) happen later, inside the registry, once the dataset is loaded.
    """


@dataclass(frozen=True)
class Public(Gate):
    """Any identity, including Anonymous."""


@dataclass(frozen=True)
class Authenticated(Gate):
    """Requires an Actor identity."""


_PUBLIC = Public()
_AUTHENTICATED = Authenticated()


def public() -> Public:
    """Mark a handler as callable without an actor."""
    return _PUBLIC


def authenticated() -> Authenticated:
    """Mark a handler as requiring an actor."""
    return _AUTHENTICATED


def enforce(handler: Any) -> None:
    """Evaluate the handler class's __auth__ gate against its injected identity.

    Raises:
        ConfigurationError: If the handler declares no usable gate.
        AuthorizationError: If the gate requires an actor and there is none.
    """
    from datareg.domain.auth.model.identity import Actor
    from datareg.domain.shared.error import AuthorizationError, ConfigurationError

    gate = getattr(type(handler), "__auth__", None)
    if not isinstance(gate, Gate):
        raise ConfigurationError(f"Handler {type(handler).__name__} has no __auth__ declaration")

    if isinstance(gate, Public):
        return

    if isinstance(gate, Authenticated):
        identity = getattr(handler, "identity", None)
        logger.debug(
            "Auth check: handler=%s, identity=%s", type(handler).__name__, type(identity).__name__
        )
        if not isinstance(identity, Actor):
            raise AuthorizationError("Actor identity required", code="missing_actor")
        return

    raise ConfigurationError(  # pragma: no cover
        f"Handler {type(handler).__name__} has unhandled __auth__ type: {type(gate).__name__}"
    )
