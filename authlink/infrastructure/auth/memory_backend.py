"""In-memory identity backend.

Used for dry runs of the CLI and in tests. Enforces the same conflict rules a
real identity backend applies to linking.
"""

import logging

from authlink.domain.linking.model.credential import (
    Credential,
    EmailPasswordCredential,
    OAuthCredential,
)
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import ProviderInfo
from authlink.domain.linking.port.auth_backend import AuthBackend
from authlink.domain.linking.service.digest import digest
from authlink.domain.shared.error import BackendError

logger = logging.getLogger(__name__)

_MIN_PASSWORD_LENGTH = 6


class InMemoryAuthBackend(AuthBackend):
    """AuthBackend keeping accounts in a dict keyed by uid.

    A global index maps (provider_id, federated_id) to the owning uid, so a
    credential can be linked to at most one account.
    """

    def __init__(self, users: list[User] | None = None) -> None:
        self._accounts: dict[str, dict[str, ProviderInfo]] = {}
        self._owners: dict[tuple[str, str], str] = {}
        for user in users or []:
            self.seed(user)

    def seed(self, user: User) -> None:
        """Register `user` and its current provider data."""
        self._accounts[user.uid] = dict(user.provider_data)
        for info in user.provider_data.values():
            self._owners[(info.provider_id, info.uid or user.uid)] = user.uid

    async def link(self, user: User, credential: Credential) -> list[ProviderInfo]:
        account = self._account(user)
        provider_id = credential.provider_id

        if provider_id in account:
            raise BackendError(
                f"User already has {provider_id} linked", code="provider_already_linked"
            )

        info = self._provider_info(credential)
        key = (provider_id, info.uid or user.uid)
        owner = self._owners.get(key)
        if owner is not None and owner != user.uid:
            raise BackendError(
                "This credential is already associated with a different user account.",
                code="credential_already_in_use",
            )

        account[provider_id] = info
        self._owners[key] = user.uid
        logger.debug("Linked %s to in-memory account %s", provider_id, user.uid)
        return list(account.values())

    async def unlink(self, user: User, provider_id: str) -> list[ProviderInfo]:
        account = self._account(user)
        info = account.pop(provider_id, None)
        if info is None:
            raise BackendError(
                f"User has no {provider_id} provider linked", code="no_such_provider"
            )

        self._owners.pop((provider_id, info.uid or user.uid), None)
        logger.debug("Unlinked %s from in-memory account %s", provider_id, user.uid)
        return list(account.values())

    async def get_provider_data(self, user: User) -> list[ProviderInfo]:
        return list(self._account(user).values())

    def _account(self, user: User) -> dict[str, ProviderInfo]:
        return self._accounts.setdefault(user.uid, dict(user.provider_data))

    def _provider_info(self, credential: Credential) -> ProviderInfo:
        if isinstance(credential, EmailPasswordCredential):
            if not credential.email or "@" not in credential.email:
                raise BackendError("The email address is badly formatted.", code="invalid_email")
            if len(credential.password) < _MIN_PASSWORD_LENGTH:
                raise BackendError(
                    f"Password should be at least {_MIN_PASSWORD_LENGTH} characters",
                    code="weak_password",
                )
            return ProviderInfo(
                provider_id=credential.provider_id,
                uid=credential.email,
                email=credential.email,
            )

        if isinstance(credential, OAuthCredential):
            # Stand-in for the federated ID the real backend extracts from the token
            return ProviderInfo(
                provider_id=credential.provider_id,
                uid=digest(credential.id_token)[:28],
            )

        raise BackendError(
            f"Unsupported credential type: {type(credential).__name__}",
            code="unsupported_credential",
        )
