"""Provider registry: lookups and the linking-screen projection."""

from enum import Enum

from authlink.domain.linking.model.provider import AuthProvider
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import LinkRow


class LinkProcedure(str, Enum):
    """How a provider is linked once selected."""

    APPLE = "apple"
    PASSWORD = "password"


_PROCEDURES: dict[AuthProvider, LinkProcedure] = {
    AuthProvider.APPLE: LinkProcedure.APPLE,
    AuthProvider.EMAIL_PASSWORD: LinkProcedure.PASSWORD,
}


class ProviderRegistry:
    """Registry of the known auth providers.

    Lookups go through an explicit string table built from the AuthProvider
    members (stable IDs and display titles), so an unknown string resolves
    to None instead of raising.
    """

    def __init__(self, providers: tuple[AuthProvider, ...] | None = None) -> None:
        """Initialize registry.

        Args:
            providers: Providers in display priority order. Defaults to all
                AuthProvider members in declaration order.
        """
        self._providers: tuple[AuthProvider, ...] = (
            providers if providers is not None else tuple(AuthProvider)
        )
        self._lookup: dict[str, AuthProvider] = {}
        for provider in self._providers:
            self._lookup[provider.provider_id] = provider
            self._lookup[provider.title] = provider

    @property
    def providers(self) -> tuple[AuthProvider, ...]:
        return self._providers

    def resolve(self, key: str) -> AuthProvider | None:
        """Resolve a stable provider ID or a display title to a provider."""
        return self._lookup.get(key)

    def is_linked(self, provider: AuthProvider, user: User) -> bool:
        return user.has_provider(provider.provider_id)

    def list_linkable(self, user: User) -> list[LinkRow]:
        """Rows for every linkable provider, in priority order."""
        return [
            LinkRow(
                title=provider.title,
                provider_id=provider.provider_id,
                is_checked=self.is_linked(provider, user),
            )
            for provider in self._providers
            if provider.linkable
        ]

    def link_procedure(self, provider: AuthProvider) -> LinkProcedure | None:
        """The procedure used to link `provider`, or None if it has none."""
        return _PROCEDURES.get(provider)
