"""Unit tests for PresetAuthorizer."""

import pytest

from authlink.domain.linking.port.authorizer import (
    AppleIDCredential,
    Authorization,
    AuthorizationRequest,
    Scope,
)
from authlink.domain.shared.error import ExternalAuthError
from authlink.infrastructure.auth.authorizer import PresetAuthorizer

REQUEST = AuthorizationRequest(challenge_id=1, scopes=(Scope.FULL_NAME, Scope.EMAIL), nonce="ab12")


class TestPresetAuthorizer:
    @pytest.mark.asyncio
    async def test_returns_preset_authorization(self):
        authorization = Authorization(
            credential=AppleIDCredential(user="001234.abc", identity_token=b"tok123")
        )
        authorizer = PresetAuthorizer(authorization)

        assert await authorizer.authorize(REQUEST) is authorization
        assert authorizer.requests == [REQUEST]

    @pytest.mark.asyncio
    async def test_without_preset_behaves_like_cancel(self):
        authorizer = PresetAuthorizer()

        with pytest.raises(ExternalAuthError) as exc_info:
            await authorizer.authorize(REQUEST)

        assert exc_info.value.code == "authorization_canceled"
