"""Identity backend port for the linking domain."""

from abc import abstractmethod
from typing import Protocol

from authlink.domain.linking.model.credential import Credential
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import ProviderInfo
from authlink.domain.shared.port import Port


class AuthBackend(Port, Protocol):
    """Port for the identity backend that owns users and their linked providers.

    Implementations are adapters in infrastructure/ (e.g. IdentityToolkitBackend).
    Every method returns the user's provider list as the backend sees it after
    the call. Retrying is always the caller's decision.
    """

    @abstractmethod
    async def link(self, user: User, credential: Credential) -> list[ProviderInfo]:
        """Link the provider behind `credential` to `user`.

        Raises:
            BackendError: If the backend rejects the credential
                (e.g. credential_already_in_use, invalid_credential)
        """
        ...

    @abstractmethod
    async def unlink(self, user: User, provider_id: str) -> list[ProviderInfo]:
        """Remove `provider_id` from `user`'s linked providers.

        Raises:
            BackendError: If the backend rejects the request
        """
        ...

    @abstractmethod
    async def get_provider_data(self, user: User) -> list[ProviderInfo]:
        """Read the user's current provider list."""
        ...
