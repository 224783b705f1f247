from dishka import AsyncContainer, make_async_container

from datareg.config import Config
from datareg.domain.auth.util.di.provider import AuthProvider
from datareg.domain.dataset.util.di.provider import DatasetProvider
from datareg.infrastructure.event.di import EventProvider
from datareg.infrastructure.notification.di import NotificationProvider
from datareg.infrastructure.persistence.di import PersistenceProvider
from datareg.util.di.scope import Scope


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        PersistenceProvider(),
        EventProvider(),
        NotificationProvider(),
        DatasetProvider(),
        AuthProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
