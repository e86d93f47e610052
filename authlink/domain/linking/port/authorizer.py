"""External authorization port (Sign in with Apple)."""

from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from authlink.domain.shared.port import Port


class Scope(str, Enum):
    """Data the user is asked to share with the app."""

    FULL_NAME = "full_name"
    EMAIL = "email"


@dataclass(frozen=True)
class AuthorizationRequest:
    """Request handed to the external authorization system."""

    challenge_id: int  # Echoed back by the linking service to detect stale completions
    scopes: tuple[Scope, ...]
    nonce: str  # SHA-256 hex digest of the raw nonce, never the raw nonce


@dataclass(frozen=True)
class AppleIDCredential:
    """Credential returned by Sign in with Apple after the user approves."""

    user: str  # Stable Apple user identifier
    identity_token: bytes | None  # JWT signed by Apple, UTF-8 encoded
    email: str | None = None
    full_name: str | None = None


@dataclass(frozen=True)
class PasswordCredential:
    """Keychain credential Apple may return instead of an Apple ID credential."""

    user: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Authorization:
    """A completed authorization."""

    credential: AppleIDCredential | PasswordCredential


class Authorizer(Port, Protocol):
    """Port for an external authorization system such as Sign in with Apple."""

    @abstractmethod
    async def authorize(self, request: AuthorizationRequest) -> Authorization:
        """Present the authorization request and wait for the user's answer.

        Raises:
            ExternalAuthError: If the user cancels or the provider is unavailable
        """
        ...
