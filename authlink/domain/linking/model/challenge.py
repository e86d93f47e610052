"""PendingChallenge entity for the Apple linking handshake."""

from datetime import UTC, datetime

from pydantic import Field

from authlink.domain.shared.error import InternalSequencingError
from authlink.domain.shared.model.entity import Entity


class PendingChallenge(Entity):
    """Nonce state for one in-flight Sign in with Apple request.

    The hashed nonce is sent to Apple with the authorization request. The raw
    nonce stays here until the identity token comes back, and is then handed
    to the backend exactly once so it can check the token's nonce claim.

    Invariants:
    - `challenge_id` is unique and increasing within one linking service
    - `nonce` is consumed at most once
    """

    challenge_id: int
    nonce: str = Field(repr=False)
    hashed_nonce: str
    issued_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    consumed_at: datetime | None = None

    @property
    def is_consumed(self) -> bool:
        return self.consumed_at is not None

    def consume(self) -> str:
        """Return the raw nonce and mark the challenge as used.

        Raises:
            InternalSequencingError: If the nonce was already consumed
        """
        if self.consumed_at is not None:
            raise InternalSequencingError(
                f"Nonce for challenge {self.challenge_id} was already consumed",
                code="nonce_already_consumed",
            )
        self.consumed_at = datetime.now(UTC)
        return self.nonce
