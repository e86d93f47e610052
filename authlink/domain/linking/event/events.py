"""Domain events for the linking domain."""

from authlink.domain.shared.error import ErrorKind
from authlink.domain.shared.event import Event


class LinkSucceeded(Event):
    """Emitted when the backend confirms a new provider link."""

    uid: str
    provider_id: str


class LinkFailed(Event):
    """Emitted when a link attempt fails with a recoverable error."""

    uid: str
    provider_id: str
    kind: ErrorKind
    message: str


class UnlinkSucceeded(Event):
    """Emitted when the backend confirms a provider was unlinked."""

    uid: str
    provider_id: str


class UnlinkFailed(Event):
    """Emitted when an unlink attempt fails. Provider data is left unchanged."""

    uid: str
    provider_id: str
    kind: ErrorKind
    message: str
