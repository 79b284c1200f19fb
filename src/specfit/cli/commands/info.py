"""Info command implementation."""

from __future__ import annotations

import sys

import numpy as np
import scipy

from specfit import __version__
from specfit.core.baseline import list_baseline_methods
from specfit.core.lineshapes import list_peak_models
from specfit.ui import console


def info_command() -> None:
    """Show system information.

    Display the specfit version, library versions and available models.
    """
    console.print("[bold]specfit System Information[/bold]\n")

    console.print(f"[green]specfit version:[/green] {__version__}")
    console.print(f"[green]Python version:[/green] {sys.version}")
    console.print(f"[green]NumPy version:[/green] {np.__version__}")
    console.print(f"[green]SciPy version:[/green] {scipy.__version__}")

    console.print(f"\n[green]Peak models:[/green] {', '.join(list_peak_models())}")
    console.print(f"[green]Baseline methods:[/green] {', '.join(list_baseline_methods())}")
