"""Shared console and logging helpers for solution-forge.

Provides Rich-based output helpers used by the command line, and the logging
setup that routes the engine's ``logging`` records through the same Rich
console.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(level: str | int = "INFO") -> None:
    """Route ``logging`` output through a ``RichHandler`` on the shared console.

    Calling it again replaces the previous handler, so the level can be
    changed after the configuration file has been read.

    Args:
        level: Level name (``"DEBUG"``, ``"INFO"``...) or number.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    root = logging.getLogger("solution_forge")
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def relative_to(path: Path, root: Path) -> str:
    """Render *path* relative to *root* when possible.

    Examples::

        relative_to(Path("/tmp/Acme/src/a.cs"), Path("/tmp/Acme")) -> "src/a.cs"
        relative_to(Path("/etc/hosts"), Path("/tmp/Acme"))         -> "/etc/hosts"
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(title: str, color: str = "bright_green") -> None:
    """Print a full-width rule with *title*."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_rows(
    columns: Iterable[str], rows: Iterable[Iterable[object]], title: str = ""
) -> None:
    """Print an arbitrary table; ``None`` cells render as a dash."""
    table = Table(title=title or None, show_header=True, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("-" if cell is None else str(cell) for cell in row))
    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
