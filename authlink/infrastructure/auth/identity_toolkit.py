"""Identity Toolkit (Firebase Auth REST API) backend adapter."""

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from authlink.config import BackendConfig
from authlink.domain.linking.model.credential import (
    Credential,
    EmailPasswordCredential,
    OAuthCredential,
)
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import ProviderInfo
from authlink.domain.linking.port.auth_backend import AuthBackend
from authlink.domain.shared.error import BackendError

logger = logging.getLogger(__name__)

# Identity Toolkit reasons that have a clearer name in the linking domain
_CODE_ALIASES = {
    "federated_user_id_already_linked": "credential_already_in_use",
    "credential_too_old_login_again": "requires_recent_login",
    "invalid_id_token": "missing_session",
    "token_expired": "missing_session",
    "invalid_idp_response": "invalid_credential",
}


def backend_error_code(message: str) -> str:
    """Normalize an Identity Toolkit error message to a code.

    "EMAIL_EXISTS : The email address is already in use" -> "email_exists"
    """
    reason = message.split(":", 1)[0].strip().lower() or "unknown"
    return _CODE_ALIASES.get(reason, reason)


class IdentityToolkitBackend(AuthBackend):
    """AuthBackend implementation on top of the Identity Toolkit v1 REST API.

    Every request is authenticated with the user's backend ID token. When a
    response carries a fresh ID token it replaces the one stored on the user.
    """

    def __init__(self, config: BackendConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    async def link(self, user: User, credential: Credential) -> list[ProviderInfo]:
        if isinstance(credential, EmailPasswordCredential):
            data = await self._post(
                "accounts:update",
                user,
                {
                    "email": credential.email,
                    "password": credential.password,
                    "returnSecureToken": True,
                },
            )
        elif isinstance(credential, OAuthCredential):
            post_body = {"id_token": credential.id_token, "providerId": credential.provider_id}
            if credential.raw_nonce:
                post_body["nonce"] = credential.raw_nonce
            data = await self._post(
                "accounts:signInWithIdp",
                user,
                {
                    "requestUri": self._config.request_uri,
                    "postBody": urlencode(post_body),
                    "returnSecureToken": True,
                    "returnIdpCredential": True,
                },
            )
            # With returnIdpCredential the API reports link conflicts in a 200 body
            if data.get("errorMessage"):
                raise BackendError(
                    f"Linking {credential.provider_id} rejected: {data['errorMessage']}",
                    code=backend_error_code(data["errorMessage"]),
                )
        else:
            raise BackendError(
                f"Unsupported credential type: {type(credential).__name__}",
                code="unsupported_credential",
            )

        self._store_token(user, data)
        return await self.get_provider_data(user)

    async def unlink(self, user: User, provider_id: str) -> list[ProviderInfo]:
        data = await self._post("accounts:update", user, {"deleteProvider": [provider_id]})
        self._store_token(user, data)

        if "providerUserInfo" in data:
            return [self._provider_info(p) for p in data["providerUserInfo"]]
        return await self.get_provider_data(user)

    async def get_provider_data(self, user: User) -> list[ProviderInfo]:
        data = await self._post("accounts:lookup", user, {})

        users = data.get("users") or []
        if not users:
            raise BackendError(f"User {user.uid} not found", code="user_not_found")

        return [self._provider_info(p) for p in users[0].get("providerUserInfo", [])]

    async def _post(self, method: str, user: User, body: dict[str, Any]) -> dict[str, Any]:
        if not user.id_token:
            raise BackendError(
                f"User {user.uid} has no backend session", code="missing_session"
            )

        url = f"{self._config.base_url}/{method}"
        try:
            response = await self._http.post(
                url,
                params={"key": self._config.api_key},
                json={"idToken": user.id_token, **body},
            )
        except httpx.RequestError as e:
            logger.exception("Identity backend request failed: %s", method)
            raise BackendError(
                "Failed to connect to the identity backend", code="backend_unavailable"
            ) from e

        if response.status_code != 200:
            raise self._error_from(method, response)

        return response.json()

    def _error_from(self, method: str, response: httpx.Response) -> BackendError:
        try:
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = f"HTTP_{response.status_code}"

        logger.error(
            "Identity backend %s failed: status=%d, message=%s",
            method,
            response.status_code,
            message,
        )
        return BackendError(
            f"Identity backend rejected {method}: {message}",
            code=backend_error_code(message),
        )

    @staticmethod
    def _store_token(user: User, data: dict[str, Any]) -> None:
        id_token = data.get("idToken")
        if id_token and id_token != user.id_token:
            logger.debug("Storing refreshed ID token for user %s", user.uid)
            user.id_token = id_token

    @staticmethod
    def _provider_info(raw: dict[str, Any]) -> ProviderInfo:
        return ProviderInfo(
            provider_id=raw["providerId"],
            uid=raw.get("federatedId") or raw.get("rawId"),
            email=raw.get("email"),
            display_name=raw.get("displayName"),
        )
