"""Shared Rich console for music-shelf.

One Console instance is used by the CLI, the output helpers and the table
renderers so styling and width detection stay consistent.
"""

from typing import Iterable, Sequence

from rich.console import Console
from rich.table import Table

_console: Console | None = None


def get_console() -> Console:
    """Get or create the global Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def safe_print(message: str, style: str | None = None) -> None:
    """Print using Rich Console with optional styling.

    Args:
        message: The message to print
        style: Optional Rich style string (e.g., "bold red", "green")
    """
    console = get_console()
    if style:
        console.print(message, style=style)
    else:
        console.print(message)


def print_error(message: str) -> None:
    """Print a user-facing error in the standard error style."""
    safe_print(f"Error: {message}", style="bold red")


def build_table(
    columns: Sequence[str],
    rows: Iterable[Sequence[str]],
    title: str | None = None,
    justify: dict[str, str] | None = None,
) -> Table:
    """Build a Rich table from plain string rows.

    Args:
        columns: Column headers
        rows: One sequence of cell strings per row
        title: Optional caption shown above the table
        justify: Optional header -> "left"/"right"/"center" overrides
    """
    justify = justify or {}
    table = Table(title=title, show_lines=False, header_style="bold cyan")
    for column in columns:
        table.add_column(column, justify=justify.get(column, "left"))
    for row in rows:
        table.add_row(*row)
    return table


def print_table(
    columns: Sequence[str],
    rows: Iterable[Sequence[str]],
    title: str | None = None,
    justify: dict[str, str] | None = None,
) -> None:
    """Render a table to the shared console (see ``build_table``)."""
    get_console().print(build_table(columns, rows, title=title, justify=justify))
