"""Rich console output helpers for assetter-cli.

Status lines and tables go through one module-level console. The
NO_COLOR environment variable and the ``--no-color`` flag both disable
styling.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Rich honours NO_COLOR itself; this also turns off forced terminal mode
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console honouring ``no_color`` and NO_COLOR."""
    disabled = no_color or _force_no_color
    return Console(force_terminal=False if disabled else None, no_color=disabled)


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success line with a green checkmark.

    Example:
        >>> success("Transpiled css/site.scss")
        ✓ Transpiled css/site.scss
    """
    console.print(f"[green]✓[/green] {escape(message)}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error line with a red X.

    Example:
        >>> error("Failed to compile site.scss")
        ✗ Failed to compile site.scss
    """
    console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning line with a yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    console.print(escape(message), **kwargs)


def print_table(
    columns: Sequence[str],
    rows: Iterable[Sequence[str]],
    *,
    title: str | None = None,
) -> None:
    """Print rows under a bold header.

    Example:
        >>> print_table(["Extension", "Output"], [(".scss", ".css")])
    """
    table = Table(show_header=True, header_style="bold", title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    console.print(table)


def set_no_color(no_color: bool) -> None:
    """Replace the module-level console, enabling or disabling colors."""
    global console
    console = create_console(no_color=no_color)
