"""DI provider for the linking domain."""

from dishka import from_context, provide

from authlink.config import Config
from authlink.domain.linking.model.user import User
from authlink.domain.linking.port.auth_backend import AuthBackend
from authlink.domain.linking.port.authorizer import Authorizer
from authlink.domain.linking.service.linking import AccountLinkingService
from authlink.domain.linking.service.nonce import NonceGenerator
from authlink.domain.linking.service.registry import ProviderRegistry
from authlink.domain.shared.port.event_bus import EventBus
from authlink.util.di.base import Provider
from authlink.util.di.scope import Scope


class LinkingProvider(Provider):
    """DI provider for linking domain services.

    The signed-in User and the Authorizer are supplied as context when a
    REQUEST scope is entered.
    """

    user = from_context(provides=User, scope=Scope.REQUEST)
    authorizer = from_context(provides=Authorizer, scope=Scope.REQUEST)

    @provide(scope=Scope.APP)
    def get_nonce_generator(self, config: Config) -> NonceGenerator:
        return NonceGenerator(_batch_size=config.nonce.batch_size)

    @provide(scope=Scope.APP)
    def get_provider_registry(self) -> ProviderRegistry:
        return ProviderRegistry()

    @provide(scope=Scope.REQUEST)
    def get_linking_service(
        self,
        config: Config,
        user: User,
        backend: AuthBackend,
        authorizer: Authorizer,
        registry: ProviderRegistry,
        nonce_generator: NonceGenerator,
        event_bus: EventBus,
    ) -> AccountLinkingService:
        """Provide AccountLinkingService for the user of this scope."""
        return AccountLinkingService(
            _user=user,
            _backend=backend,
            _authorizer=authorizer,
            _registry=registry,
            _nonce_generator=nonce_generator,
            _event_bus=event_bus,
            _nonce_length=config.nonce.length,
            _scopes=tuple(config.apple.scopes),
        )
