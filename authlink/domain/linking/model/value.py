"""Value objects for the linking domain."""

from enum import Enum

from authlink.domain.shared.error import ErrorKind
from authlink.domain.shared.model.value import ValueObject


class LinkState(str, Enum):
    """Lifecycle of the account linking state machine.

    Apple:    IDLE -> CHALLENGE_ISSUED -> CREDENTIAL_EXCHANGED -> LINKED
    Password: IDLE -> CREDENTIAL_EXCHANGED -> LINKED
    Unlink:   IDLE -> UNLINKED
    """

    IDLE = "idle"
    CHALLENGE_ISSUED = "challenge_issued"
    CREDENTIAL_EXCHANGED = "credential_exchanged"
    LINKED = "linked"
    UNLINKED = "unlinked"
    FAILED = "failed"


class ProviderInfo(ValueObject):
    """Metadata for one provider linked to a user, as reported by the backend."""

    provider_id: str
    uid: str | None = None  # Provider-specific user ID (federated ID)
    email: str | None = None
    display_name: str | None = None


class LinkRow(ValueObject):
    """One row of the linking screen.

    `is_checked` is computed from the user's provider data when the row is
    built and is never stored anywhere else.
    """

    title: str
    provider_id: str
    is_checked: bool


class LinkResult(ValueObject):
    """Outcome of a single link or unlink attempt."""

    success: bool
    provider_id: str
    error: ErrorKind | None = None
    message: str | None = None
    code: str | None = None  # Machine-readable reason, e.g. credential_already_in_use

    @classmethod
    def ok(cls, provider_id: str) -> "LinkResult":
        return cls(success=True, provider_id=provider_id)

    @classmethod
    def failed(
        cls,
        provider_id: str,
        error: ErrorKind,
        message: str | None = None,
        code: str | None = None,
    ) -> "LinkResult":
        return cls(success=False, provider_id=provider_id, error=error, message=message, code=code)
