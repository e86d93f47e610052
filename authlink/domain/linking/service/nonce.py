"""Nonce generation for replay protection."""

import logging
import secrets
import string
from collections.abc import Callable

from authlink.domain.shared.error import RandomSourceFailure
from authlink.domain.shared.service import Service

logger = logging.getLogger(__name__)

NONCE_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase + "-._"
"""Characters a nonce is drawn from. The order is fixed; index i maps byte value i."""

DEFAULT_NONCE_LENGTH = 32
DEFAULT_BATCH_SIZE = 16


class NonceGenerator(Service):
    """Generates random nonces from NONCE_ALPHABET.

    Bytes come from a cryptographically secure source in batches. A byte is
    used only when its value is a valid alphabet index, so every character is
    equally likely (no modulo bias). Any failure of the source is fatal:
    there is no fallback to a weaker generator.
    """

    _batch_size: int = DEFAULT_BATCH_SIZE
    _random_bytes: Callable[[int], bytes] = secrets.token_bytes

    def __post_init__(self) -> None:
        if self._batch_size <= 0:
            raise ValueError(f"Nonce batch size must be > 0, got {self._batch_size}")

    def generate(self, length: int = DEFAULT_NONCE_LENGTH) -> str:
        """Generate a nonce of exactly `length` characters.

        Raises:
            ValueError: If length is not positive
            RandomSourceFailure: If the random source fails
        """
        if length <= 0:
            raise ValueError(f"Nonce length must be > 0, got {length}")

        alphabet_size = len(NONCE_ALPHABET)
        chars: list[str] = []

        while len(chars) < length:
            for byte in self._read_batch():
                if byte < alphabet_size:
                    chars.append(NONCE_ALPHABET[byte])
                    if len(chars) == length:
                        break

        return "".join(chars)

    def _read_batch(self) -> bytes:
        try:
            batch = self._random_bytes(self._batch_size)
        except Exception as e:
            logger.critical("Secure random source failed: %s", e)
            raise RandomSourceFailure(
                f"Unable to generate nonce: random source failed ({e})",
                code="random_source_failure",
            ) from e

        if len(batch) != self._batch_size:
            raise RandomSourceFailure(
                f"Unable to generate nonce: expected {self._batch_size} random bytes, "
                f"got {len(batch)}",
                code="random_source_short_read",
            )
        return batch
