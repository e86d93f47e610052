from dishka import AsyncContainer, make_async_container

from authlink.config import Config
from authlink.domain.linking.util.di import LinkingProvider
from authlink.infrastructure.auth import LinkingInfraProvider
from authlink.util.di.scope import Scope


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()

    return make_async_container(
        LinkingInfraProvider(),
        LinkingProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
