"""Global command implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from specfit.cli.common import (
    ConfigOption,
    LogFileOption,
    MarkdownOption,
    VerboseOption,
    choose,
    finish,
    load_settings,
    run_fit,
    session,
)
from specfit.core.fitting.global_fit import fit_global
from specfit.io.data import load_trace
from specfit.ui import log_dict


def global_command(
    data: Annotated[
        list[Path],
        typer.Argument(
            help="Kinetic trace files sharing the same kinetics",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    labels: Annotated[
        list[str] | None,
        typer.Option("--label", "-l", help="Trace label (once per trace, in order)"),
    ] = None,
    n_exp: Annotated[
        int | None,
        typer.Option("--n-exp", "-n", help="Number of shared components", min=1, max=6),
    ] = None,
    irf: Annotated[
        bool | None,
        typer.Option("--irf/--no-irf", help="Convolve with a Gaussian instrument response"),
    ] = None,
    irf_width: Annotated[
        float | None,
        typer.Option("--irf-width", help="Initial IRF sigma (time units)", min=0.0),
    ] = None,
    t_start: Annotated[
        float | None,
        typer.Option("--t-start", help="Fixed time zero for fits without IRF"),
    ] = None,
    config: ConfigOption = None,
    markdown: MarkdownOption = None,
    log_file: LogFileOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Fit several kinetic traces with shared time constants.

    Examples
    --------
      ESA and GSB traces with one shared lifetime:
        $ specfit global esa.txt gsb.txt -l ESA -l GSB
    """
    settings = load_settings(config)
    decay_config = settings.decay
    options = {
        "n_exp": choose(n_exp, decay_config.n_exp),
        "irf": choose(irf, decay_config.irf),
        "irf_width": choose(irf_width, decay_config.irf_width),
        "t_start": choose(t_start, decay_config.t_start),
        "confidence": decay_config.confidence,
    }

    with session(settings, log_file, verbose):
        traces = [run_fit(load_trace, path) for path in data]
        log_dict({"files": ", ".join(str(path) for path in data), **options})
        result = run_fit(
            fit_global,
            traces,
            labels=labels or None,
            solver=settings.solver,
            **options,
        )
        finish(result, markdown)
