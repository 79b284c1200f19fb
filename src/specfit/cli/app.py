"""Main Typer application for specfit.

This module provides a thin orchestration layer that creates the Typer
application and registers the commands from the commands/ subpackage.
"""

from typing import Annotated

import typer

from specfit.cli.callbacks import version_callback
from specfit.cli.commands import (
    baseline_command,
    decay_command,
    global_command,
    info_command,
    init_command,
    peaks_command,
)

# Create main application
app = typer.Typer(
    name="specfit",
    help="specfit - Curve fitting for spectroscopy data",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """specfit - Peak decomposition, baselines and kinetic fits for spectroscopy.

    Reads plain numeric columns and reports fitted parameters with uncertainties.
    """


# Register commands
app.command(name="baseline")(baseline_command)
app.command(name="peaks")(peaks_command)
app.command(name="decay")(decay_command)
app.command(name="global")(global_command)
app.command(name="init")(init_command)
app.command(name="info")(info_command)
