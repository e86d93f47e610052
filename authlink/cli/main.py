"""Main CLI application using Cyclopts."""

import cyclopts

from authlink.cli.commands import link, nonce, providers

app = cyclopts.App(
    name="authlink",
    help="Account linking - link and unlink auth providers",
)

app.command(nonce.app, name="nonce")
app.command(nonce.digest_app, name="digest")
app.command(providers.app, name="providers")
app.command(link.app, name="link")
app.command(link.unlink_app, name="unlink")
