"""Non-interactive Authorizer adapter."""

import logging

from authlink.domain.linking.port.authorizer import (
    Authorization,
    AuthorizationRequest,
    Authorizer,
)
from authlink.domain.shared.error import ExternalAuthError

logger = logging.getLogger(__name__)


class PresetAuthorizer(Authorizer):
    """Answers every authorization request with a preset Authorization.

    Without a preset it behaves like a user who cancels, which is the right
    answer for a process that cannot show the Sign in with Apple sheet.
    """

    def __init__(self, authorization: Authorization | None = None) -> None:
        self._authorization = authorization
        self.requests: list[AuthorizationRequest] = []

    async def authorize(self, request: AuthorizationRequest) -> Authorization:
        self.requests.append(request)
        logger.debug(
            "Authorization requested: challenge=%d, hashed_nonce=%s",
            request.challenge_id,
            request.nonce,
        )
        if self._authorization is None:
            raise ExternalAuthError(
                "No interactive authorization available", code="authorization_canceled"
            )
        return self._authorization
