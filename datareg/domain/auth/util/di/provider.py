"""DI provider for request identity."""

import logging

from dishka import from_context, provide
from starlette.requests import Request

from datareg.config import Config
from datareg.domain.auth.model.identity import Actor, Anonymous, Identity
from datareg.domain.auth.model.value import ActorId
from datareg.util.di.base import Provider
from datareg.util.di.scope import Scope

logger = logging.getLogger(__name__)


class AuthProvider(Provider):
    """Resolves who is calling from the trusted actor header.

    Authentication happens upstream; whatever the gateway put in
    ``config.auth.actor_header`` is taken at face value. A missing or blank
    header means Anonymous.
    """

    request = from_context(provides=Request, scope=Scope.UOW)

    @provide(scope=Scope.UOW)
    def get_identity(self, request: Request, config: Config) -> Identity:
        actor_id = request.headers.get(config.auth.actor_header, "").strip()
        if not actor_id:
            return Anonymous()
        logger.debug("Request identity: actor=%s", actor_id)
        return Actor(actor_id=ActorId(actor_id))
