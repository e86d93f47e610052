"""Error hierarchy for authlink.

Error layers:
- AuthLinkError: Base class for all authlink errors
- DomainError: Business rule violations, invalid input or state
- InfrastructureError: Failures of the identity backend or external authorization
- FatalError: Unrecoverable environment or sequencing faults; never converted
  into a LinkResult, they abort the flow

Recoverable errors that carry an ErrorKind are converted into failed
LinkResults and failure events by the linking service.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories reported to the presentation layer."""

    BACKEND_ERROR = "backend_error"
    EXTERNAL_AUTH_ERROR = "external_auth_error"
    MISSING_TOKEN = "missing_token"
    DECODE_ERROR = "decode_error"
    NONCE_MISMATCH = "nonce_mismatch"
    STALE_CHALLENGE = "stale_challenge"
    RANDOM_SOURCE_FAILURE = "random_source_failure"
    INTERNAL_SEQUENCING_ERROR = "internal_sequencing_error"


class AuthLinkError(Exception):
    """Base class for all authlink errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(AuthLinkError):
    """Base class for domain/business errors."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class LinkingError(DomainError):
    """A recoverable failure while turning an external assertion into a credential."""

    kind: ErrorKind = ErrorKind.EXTERNAL_AUTH_ERROR


class MissingTokenError(LinkingError):
    """The authorization response carried no identity token."""

    kind = ErrorKind.MISSING_TOKEN


class TokenDecodeError(LinkingError):
    """The identity token could not be decoded as UTF-8 text."""

    kind = ErrorKind.DECODE_ERROR


class NonceMismatchError(LinkingError):
    """The identity token is bound to a different nonce than the pending challenge."""

    kind = ErrorKind.NONCE_MISMATCH


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(AuthLinkError):
    """Base class for infrastructure/system errors."""


class ExternalServiceError(InfrastructureError):
    """External service (identity backend, authorization provider) failed."""

    kind: ErrorKind = ErrorKind.BACKEND_ERROR


class BackendError(ExternalServiceError):
    """The identity backend rejected a link or unlink request.

    `code` carries the backend's reason, e.g. `credential_already_in_use`.
    """

    kind = ErrorKind.BACKEND_ERROR


class ExternalAuthError(ExternalServiceError):
    """The external authorization step failed (user cancelled, provider unavailable)."""

    kind = ErrorKind.EXTERNAL_AUTH_ERROR


# =============================================================================
# Fatal Errors
# =============================================================================


class FatalError(AuthLinkError):
    """Base class for unrecoverable errors. No safe continuation exists."""

    kind: ErrorKind


class RandomSourceFailure(FatalError):
    """The secure random source failed to produce bytes."""

    kind = ErrorKind.RANDOM_SOURCE_FAILURE


class InternalSequencingError(FatalError):
    """An authorization completion arrived for a challenge that was never issued
    or was already consumed."""

    kind = ErrorKind.INTERNAL_SEQUENCING_ERROR
