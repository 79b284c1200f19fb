"""Init command implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from specfit.io.config import generate_default_config
from specfit.ui import console
from specfit.ui.messages import error, info, success


def init_command(
    path: Annotated[
        Path,
        typer.Argument(
            help="Path for new configuration file",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = Path("specfit.toml"),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing file",
        ),
    ] = False,
) -> None:
    """Generate a default configuration file.

    Creates a TOML configuration file with default settings that can be
    customized and passed to any fitting command with ``--config``.

    Examples
    --------
      Create default config:
        $ specfit init

      Overwrite existing config:
        $ specfit init my_analysis.toml --force
    """
    if path.exists() and not force:
        error(f"File already exists: [path]{path}[/path]")
        info("Use [bold]--force[/bold] to overwrite")
        raise typer.Exit(1)

    path.write_text(generate_default_config(), encoding="utf-8")
    success(f"Created configuration file: [path]{path}[/path]")

    console.print("\n[header]Configuration includes:[/header]")
    console.print("  • [value]Solver tolerances[/value] (max_nfev, ftol, xtol, gtol)")
    console.print("  • [value]Baseline settings[/value] (method, smoothness, asymmetry)")
    console.print("  • [value]Peak fitting[/value] (model, baseline order, region)")
    console.print("  • [value]Decay fitting[/value] (components, IRF)")
