"""DI provider for linking infrastructure."""

import logging
from collections.abc import AsyncIterator

import httpx
from dishka import AnyOf, from_context, provide

from authlink.config import Config
from authlink.domain.linking.port.auth_backend import AuthBackend
from authlink.domain.shared.port.event_bus import EventBus
from authlink.infrastructure.auth.identity_toolkit import IdentityToolkitBackend
from authlink.infrastructure.auth.memory_backend import InMemoryAuthBackend
from authlink.infrastructure.event.memory_bus import InMemoryEventBus
from authlink.util.di.base import Provider
from authlink.util.di.scope import Scope

logger = logging.getLogger(__name__)


class LinkingInfraProvider(Provider):
    """DI provider for the identity backend, HTTP client and event bus."""

    config = from_context(provides=Config, scope=Scope.APP)

    event_bus = provide(
        InMemoryEventBus,
        scope=Scope.APP,
        provides=AnyOf[EventBus, InMemoryEventBus],
    )

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterator[httpx.AsyncClient]:
        """Shared HTTP client for backend calls, closed with the container."""
        async with httpx.AsyncClient(timeout=config.backend.timeout) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_auth_backend(self, config: Config, http_client: httpx.AsyncClient) -> AuthBackend:
        """Identity Toolkit when an API key is configured, in-memory otherwise."""
        if config.backend.enabled:
            return IdentityToolkitBackend(config=config.backend, http_client=http_client)

        logger.info("No backend API key configured, using in-memory backend (dry run)")
        return InMemoryAuthBackend()
