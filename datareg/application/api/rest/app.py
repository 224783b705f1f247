import asyncio
import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from datareg.application.api.v1.errors import map_registry_error
from datareg.application.api.v1.routes import datasets, events, health, stats
from datareg.application.di import create_container
from datareg.config import Config, configure_logging
from datareg.domain.shared.error import RegistryError
from datareg.infrastructure.event.worker import WorkerPool
from datareg.infrastructure.persistence.database import is_memory_sqlite
from datareg.infrastructure.persistence.migrate import run_migrations
from datareg.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config = await container.get(Config)

    url = config.database.url
    if config.database.auto_migrate and url.startswith("sqlite") and not is_memory_sqlite(url):
        await asyncio.to_thread(run_migrations, url)

    # Notification forwarders run for as long as the server does
    worker_pool = await container.get(WorkerPool)
    async with worker_pool:
        yield

    await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    logfire.configure(
        service_name="datareg",
        service_version=config.server.version,
        send_to_logfire="if-token-present",
        console=False,
    )

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    container = create_container(config)
    setup_dishka(container, app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(datasets.router, prefix="/api/v1")
    app_instance.include_router(events.router, prefix="/api/v1")
    app_instance.include_router(stats.router, prefix="/api/v1")

    # Domain and infrastructure errors become {"code", "message"} JSON bodies
    @app_instance.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        http_exc = map_registry_error(exc)
        return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)

    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"code": "INTERNAL_ERROR", "message": "Internal server error"},
        )

    return app_instance

