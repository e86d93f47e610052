"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output.
All CLI output should go through this module.
"""

from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table

from authlink.domain.linking.model.value import LinkResult


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (pass-through to rich)."""
        self._console.print(*args, **kwargs)

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
    ) -> None:
        """Print a table of rows, one column per (key, header) pair."""
        table = Table(title=title, show_header=True, header_style="bold")

        for _, header in columns:
            table.add_column(header)

        for row in rows:
            table.add_row(*[str(row.get(key, "")) for key, _ in columns])

        self._console.print(table)

    def link_result(self, result: LinkResult, *, action: str) -> None:
        """Print the outcome of a link or unlink attempt."""
        if result.success:
            self.success(f"{action} {result.provider_id}")
            return

        kind = result.error.value if result.error else "error"
        self.error(
            f"{action} {result.provider_id} failed: {result.message}",
            hint=f"{kind} ({result.code})" if result.code else kind,
        )


_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
