"""One-way digest used to bind a nonce to an external authorization request."""

import hashlib


def digest(value: str) -> str:
    """Create SHA256 hash of a string.

    Args:
        value: The raw string (usually a nonce)

    Returns:
        Hex-encoded SHA256 hash (64 lowercase characters)
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
