"""Link and unlink commands."""

import cyclopts

from authlink.cli.runtime import cli_user, execute
from authlink.domain.linking.model.credential import oauth_credential
from authlink.domain.linking.service.linking import APPLE_PROVIDER_ID

app = cyclopts.App(name="link", help="Link an auth provider to a user")
unlink_app = cyclopts.App(name="unlink", help="Unlink an auth provider from a user")


@app.command(name="password")
def link_password(
    *,
    email: str,
    password: str,
    id_token: str | None = None,
    uid: str = "cli-user",
    linked: list[str] | None = None,
) -> None:
    """Link an email & password login.

    Args:
        email: Email address for the new login.
        password: Password for the new login.
        id_token: Backend ID token of the signed-in user.
        uid: User ID (dry runs only).
        linked: Providers the user already has (dry runs only, repeatable).
    """
    user = cli_user(uid, id_token, linked or [])
    execute(user, lambda service: service.begin_password_link(email, password), verb="Linked")


@app.command(name="apple")
def link_apple(
    *,
    identity_token: str,
    raw_nonce: str,
    id_token: str | None = None,
    uid: str = "cli-user",
    linked: list[str] | None = None,
) -> None:
    """Link an Apple ID from an identity token obtained out of band.

    The token must have been requested with the digest of RAW_NONCE
    (see `authlink nonce`).

    Args:
        identity_token: Identity token returned by Sign in with Apple.
        raw_nonce: Nonce whose digest was sent with the authorization request.
        id_token: Backend ID token of the signed-in user.
        uid: User ID (dry runs only).
        linked: Providers the user already has (dry runs only, repeatable).
    """
    user = cli_user(uid, id_token, linked or [])
    credential = oauth_credential(APPLE_PROVIDER_ID, identity_token, raw_nonce)
    execute(user, lambda service: service.link_account(credential), verb="Linked")


@unlink_app.default
def unlink(
    provider_id: str,
    /,
    *,
    id_token: str | None = None,
    uid: str = "cli-user",
    linked: list[str] | None = None,
) -> None:
    """Unlink PROVIDER_ID from the signed-in user.

    Args:
        provider_id: Provider to remove, e.g. apple.com or password.
        id_token: Backend ID token of the signed-in user.
        uid: User ID (dry runs only).
        linked: Providers the user already has (dry runs only, repeatable).
    """
    user = cli_user(uid, id_token, linked or [])
    execute(user, lambda service: service.unlink(provider_id), verb="Unlinked")
