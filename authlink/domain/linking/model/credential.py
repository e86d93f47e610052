"""Backend credentials produced by the linking flow.

Credentials are opaque to the domain: they are built here and consumed only
by the AuthBackend adapter.
"""

from typing import Literal

from pydantic import Field

from authlink.domain.linking.model.provider import AuthProvider
from authlink.domain.shared.model.value import ValueObject


class Credential(ValueObject):
    """Base class for credentials accepted by AuthBackend.link()."""

    provider_id: str


class EmailPasswordCredential(Credential):
    provider_id: Literal["password"] = "password"
    email: str
    password: str = Field(repr=False)


class OAuthCredential(Credential):
    """Credential from an OIDC provider: identity token plus the raw nonce it was bound to."""

    id_token: str = Field(repr=False)
    raw_nonce: str | None = Field(default=None, repr=False)


def email_password_credential(email: str, password: str) -> EmailPasswordCredential:
    """Build a password credential. No format validation; the backend decides."""
    return EmailPasswordCredential(
        provider_id=AuthProvider.EMAIL_PASSWORD.provider_id, email=email, password=password
    )


def oauth_credential(provider_id: str, id_token: str, raw_nonce: str | None) -> OAuthCredential:
    return OAuthCredential(provider_id=provider_id, id_token=id_token, raw_nonce=raw_nonce)
