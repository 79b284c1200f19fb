"""Decay command implementation."""

from __future__ import annotations

from typing import Annotated

import typer

from specfit.cli.common import (
    ConfigOption,
    DataArgument,
    LogFileOption,
    MarkdownOption,
    VerboseOption,
    choose,
    finish,
    load_settings,
    run_fit,
    session,
)
from specfit.core.fitting.decay import fit_exp_decay
from specfit.io.data import load_trace
from specfit.ui import log_dict


def decay_command(
    data: DataArgument,
    n_exp: Annotated[
        int | None,
        typer.Option("--n-exp", "-n", help="Number of exponential components", min=1, max=6),
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
    """Fit a multi-exponential decay to a kinetic trace.

    Examples
    --------
      Bi-exponential decay with IRF:
        $ specfit decay trace.txt -n 2

      Single exponential starting at t = 0.5 without IRF:
        $ specfit decay trace.txt --no-irf --t-start 0.5
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
        trace = run_fit(load_trace, data)
        log_dict({"file": data, **options})
        result = run_fit(fit_exp_decay, trace, solver=settings.solver, **options)
        finish(result, markdown)
