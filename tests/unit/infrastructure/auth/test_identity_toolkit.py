"""Unit tests for IdentityToolkitBackend adapter."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from authlink.config import BackendConfig
from authlink.domain.linking.model.credential import (
    Credential,
    email_password_credential,
    oauth_credential,
)
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import ProviderInfo
from authlink.domain.shared.error import BackendError
from authlink.infrastructure.auth.identity_toolkit import IdentityToolkitBackend, backend_error_code

BASE_URL = "https://identitytoolkit.googleapis.com/v1"


def make_response(status_code: int = 200, body: dict | None = None) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = body if body is not None else {}
    return response


def lookup_response(*provider_user_info: dict) -> MagicMock:
    user = {"localId": "u1", "providerUserInfo": list(provider_user_info)}
    return make_response(body={"users": [user]})


def make_backend(client: AsyncMock) -> IdentityToolkitBackend:
    return IdentityToolkitBackend(config=BackendConfig(api_key="test-key"), http_client=client)


def make_user(id_token: str | None = "session-token") -> User:
    return User.create("u1", providers=["google.com"], id_token=id_token)


class TestBackendErrorCode:
    @pytest.mark.parametrize(
        "message,code",
        [
            ("EMAIL_EXISTS", "email_exists"),
            ("EMAIL_EXISTS : The email address is already in use", "email_exists"),
            ("WEAK_PASSWORD : Password should be at least 6 characters", "weak_password"),
            ("FEDERATED_USER_ID_ALREADY_LINKED", "credential_already_in_use"),
            ("CREDENTIAL_TOO_OLD_LOGIN_AGAIN", "requires_recent_login"),
            ("INVALID_ID_TOKEN", "missing_session"),
            ("", "unknown"),
        ],
    )
    def test_normalizes_message(self, message: str, code: str):
        assert backend_error_code(message) == code


class TestLinkPassword:
    @pytest.mark.asyncio
    async def test_updates_account_then_reads_providers(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.side_effect = [
            make_response(body={"localId": "u1", "idToken": "fresh-token"}),
            lookup_response(
                {"providerId": "google.com", "federatedId": "g-1"},
                {
                    "providerId": "password",
                    "federatedId": "jane@example.com",
                    "email": "jane@example.com",
                },
            ),
        ]
        user = make_user()

        result = await make_backend(client).link(
            user, email_password_credential("jane@example.com", "hunter22")
        )

        assert result == [
            ProviderInfo(provider_id="google.com", uid="g-1"),
            ProviderInfo(provider_id="password", uid="jane@example.com", email="jane@example.com"),
        ]
        update_call, lookup_call = client.post.call_args_list
        assert update_call.args == (f"{BASE_URL}/accounts:update",)
        assert update_call.kwargs["params"] == {"key": "test-key"}
        assert update_call.kwargs["json"] == {
            "idToken": "session-token",
            "email": "jane@example.com",
            "password": "hunter22",
            "returnSecureToken": True,
        }
        assert lookup_call.args == (f"{BASE_URL}/accounts:lookup",)
        assert lookup_call.kwargs["json"] == {"idToken": "fresh-token"}

    @pytest.mark.asyncio
    async def test_stores_fresh_id_token(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.side_effect = [
            make_response(body={"idToken": "fresh-token"}),
            lookup_response(),
        ]
        user = make_user()

        await make_backend(client).link(user, email_password_credential("a@b.co", "secret1"))

        assert user.id_token == "fresh-token"

    @pytest.mark.asyncio
    async def test_maps_error_body(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.return_value = make_response(
            400, {"error": {"code": 400, "message": "EMAIL_EXISTS : already in use"}}
        )

        with pytest.raises(BackendError) as exc_info:
            await make_backend(client).link(make_user(), email_password_credential("a@b.co", "x"))

        assert exc_info.value.code == "email_exists"
        client.post.assert_called_once()

    @pytest.mark.asyncio
    async def test_maps_non_json_error(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        response = make_response(503)
        response.json.side_effect = ValueError("not json")
        client.post.return_value = response

        with pytest.raises(BackendError) as exc_info:
            await make_backend(client).link(make_user(), email_password_credential("a@b.co", "x"))

        assert exc_info.value.code == "http_503"


class TestLinkOAuth:
    @pytest.mark.asyncio
    async def test_signs_in_with_idp(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.side_effect = [
            make_response(body={"federatedId": "001234.abc", "providerId": "apple.com"}),
            lookup_response({"providerId": "apple.com", "rawId": "001234.abc"}),
        ]

        result = await make_backend(client).link(
            make_user(), oauth_credential("apple.com", "tok123", "abc")
        )

        assert result == [ProviderInfo(provider_id="apple.com", uid="001234.abc")]
        idp_call = client.post.call_args_list[0]
        assert idp_call.args == (f"{BASE_URL}/accounts:signInWithIdp",)
        assert idp_call.kwargs["json"] == {
            "idToken": "session-token",
            "requestUri": "http://localhost",
            "postBody": "id_token=tok123&providerId=apple.com&nonce=abc",
            "returnSecureToken": True,
            "returnIdpCredential": True,
        }

    @pytest.mark.asyncio
    async def test_omits_missing_nonce(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.side_effect = [make_response(), lookup_response()]

        await make_backend(client).link(make_user(), oauth_credential("apple.com", "tok123", None))

        post_body = client.post.call_args_list[0].kwargs["json"]["postBody"]
        assert post_body == "id_token=tok123&providerId=apple.com"

    @pytest.mark.asyncio
    async def test_link_conflict_in_success_body(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.return_value = make_response(
            body={"errorMessage": "FEDERATED_USER_ID_ALREADY_LINKED"}
        )

        with pytest.raises(BackendError) as exc_info:
            await make_backend(client).link(
                make_user(), oauth_credential("apple.com", "tok123", "abc")
            )

        assert exc_info.value.code == "credential_already_in_use"
        client.post.assert_called_once()

    @pytest.mark.asyncio
    async def test_rejects_unknown_credential_type(self):
        client = AsyncMock(spec=httpx.AsyncClient)

        with pytest.raises(BackendError) as exc_info:
            await make_backend(client).link(make_user(), Credential(provider_id="saml.example"))

        assert exc_info.value.code == "unsupported_credential"
        client.post.assert_not_called()


class TestUnlink:
    @pytest.mark.asyncio
    async def test_deletes_provider(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.return_value = make_response(
            body={"localId": "u1", "providerUserInfo": [{"providerId": "apple.com"}]}
        )

        result = await make_backend(client).unlink(make_user(), "google.com")

        assert result == [ProviderInfo(provider_id="apple.com")]
        client.post.assert_called_once()
        assert client.post.call_args.kwargs["json"] == {
            "idToken": "session-token",
            "deleteProvider": ["google.com"],
        }

    @pytest.mark.asyncio
    async def test_reads_providers_when_response_has_none(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.side_effect = [make_response(body={"localId": "u1"}), lookup_response()]

        result = await make_backend(client).unlink(make_user(), "google.com")

        assert result == []
        assert client.post.call_count == 2


class TestSessionAndTransport:
    @pytest.mark.asyncio
    async def test_user_without_session_is_rejected(self):
        client = AsyncMock(spec=httpx.AsyncClient)

        with pytest.raises(BackendError) as exc_info:
            await make_backend(client).unlink(make_user(id_token=None), "google.com")

        assert exc_info.value.code == "missing_session"
        client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(BackendError) as exc_info:
            await make_backend(client).get_provider_data(make_user())

        assert exc_info.value.code == "backend_unavailable"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.return_value = make_response(
            body={"kind": "identitytoolkit#GetAccountInfoResponse"}
        )

        with pytest.raises(BackendError) as exc_info:
            await make_backend(client).get_provider_data(make_user())

        assert exc_info.value.code == "user_not_found"
