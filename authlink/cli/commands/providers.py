"""Providers command - show the linking screen."""

import cyclopts

from authlink.cli.console import get_console
from authlink.domain.linking.model.user import User
from authlink.domain.linking.service.registry import ProviderRegistry

app = cyclopts.App(name="providers", help="List linkable auth providers")


@app.default
def providers(*, linked: list[str] | None = None) -> None:
    """Show every linkable provider and whether it is linked.

    Args:
        linked: Provider IDs the user already has (repeatable).
    """
    registry = ProviderRegistry()
    user = User.create("cli-user", providers=linked or [])

    rows = [
        {
            "title": row.title,
            "provider_id": row.provider_id,
            "linked": "[green]✓[/green]" if row.is_checked else "",
        }
        for row in registry.list_linkable(user)
    ]
    get_console().table(
        rows,
        [("title", "Provider"), ("provider_id", "ID"), ("linked", "Linked")],
        title="Linked accounts",
    )
