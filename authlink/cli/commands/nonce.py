"""Nonce and digest commands."""

import sys

import cyclopts

from authlink.cli.console import get_console
from authlink.domain.linking.service.digest import digest as sha256_digest
from authlink.domain.linking.service.nonce import DEFAULT_NONCE_LENGTH, NonceGenerator
from authlink.domain.shared.error import RandomSourceFailure

app = cyclopts.App(name="nonce", help="Generate a nonce for Sign in with Apple")
digest_app = cyclopts.App(name="digest", help="SHA-256 hex digest of a value")


@app.default
def nonce(*, length: int = DEFAULT_NONCE_LENGTH) -> None:
    """Print a fresh nonce and its digest.

    Send the digest with the authorization request and keep the nonce for
    `authlink link apple --raw-nonce`.

    Args:
        length: Number of characters in the nonce.
    """
    console = get_console()
    if length <= 0:
        console.error(f"Invalid length: {length}", hint="Length must be greater than 0")
        sys.exit(1)

    try:
        raw = NonceGenerator().generate(length)
    except RandomSourceFailure as e:
        console.error(e.message, hint=e.code)
        sys.exit(2)

    console.print(f"[bold]nonce:[/bold]  {raw}")
    console.print(f"[bold]digest:[/bold] {sha256_digest(raw)}")


@digest_app.default
def digest(value: str, /) -> None:
    """Print the SHA-256 hex digest of VALUE."""
    get_console().print(sha256_digest(value))
