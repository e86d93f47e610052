from authlink.domain.linking.model.challenge import PendingChallenge
from authlink.domain.linking.model.credential import (
    Credential,
    EmailPasswordCredential,
    OAuthCredential,
    email_password_credential,
    oauth_credential,
)
from authlink.domain.linking.model.provider import AuthProvider
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import LinkResult, LinkRow, LinkState, ProviderInfo

__all__ = [
    "AuthProvider",
    "Credential",
    "EmailPasswordCredential",
    "LinkResult",
    "LinkRow",
    "LinkState",
    "OAuthCredential",
    "PendingChallenge",
    "ProviderInfo",
    "User",
    "email_password_credential",
    "oauth_credential",
]
