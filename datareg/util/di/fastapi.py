"""Dishka wiring for FastAPI: one Scope.UOW container per HTTP request."""

from dishka import AsyncContainer
from fastapi import FastAPI
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Send
from starlette.types import Scope as ASGIScope

from datareg.util.di.scope import Scope


class UnitOfWorkMiddleware:
    """Opens a Scope.UOW child container around each HTTP request.

    Stands in for dishka's starlette ContainerMiddleware, which only knows
    about dishka.Scope.REQUEST. The Request is placed in the container context
    so providers (identity resolution) can read headers from it. Lifespan and
    other non-HTTP traffic passes straight through.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: ASGIScope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive, send=send)
        root: AsyncContainer = request.app.state.dishka_container
        async with root({Request: request}, scope=Scope.UOW) as uow_container:
            request.state.dishka_container = uow_container
            await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app: FastAPI) -> None:
    """Attach the root container to the app and install the per-request middleware."""
    app.add_middleware(UnitOfWorkMiddleware)
    app.state.dishka_container = container
