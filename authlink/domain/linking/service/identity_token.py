"""Helpers for the identity token returned by Sign in with Apple."""

import logging

import jwt

from authlink.domain.shared.error import MissingTokenError, TokenDecodeError

logger = logging.getLogger(__name__)

_UNVERIFIED = {
    "verify_signature": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}


def decode_identity_token(raw: bytes | None) -> str:
    """Turn the raw identity token bytes into the token string.

    Raises:
        MissingTokenError: If no token was returned
        TokenDecodeError: If the bytes are not valid UTF-8
    """
    if raw is None:
        raise MissingTokenError("Unable to fetch identity token", code="missing_identity_token")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TokenDecodeError(
            f"Unable to serialize token string from data ({len(raw)} bytes)",
            code="identity_token_not_utf8",
        ) from e


def peek_nonce_claim(id_token: str) -> str | None:
    """Read the `nonce` claim of a JWT identity token without verifying it.

    Only used for an early client-side consistency check; the backend verifies
    the signature and the nonce binding. Returns None when the token is not a
    JWT or has no nonce claim.
    """
    try:
        claims = jwt.decode(id_token, options=_UNVERIFIED)
    except jwt.InvalidTokenError as e:
        logger.debug("Identity token is not a decodable JWT, skipping nonce check: %s", e)
        return None

    nonce = claims.get("nonce")
    return nonce if isinstance(nonce, str) else None
