"""Typer callbacks for CLI."""

import typer

from specfit import __version__
from specfit.ui import console


def version_callback(value: bool | None) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"specfit [bold]{__version__}[/bold]")
        raise typer.Exit
