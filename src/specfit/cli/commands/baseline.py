"""Baseline command implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import numpy as np
import typer
from pydantic import ValidationError

from specfit.cli.common import (
    ConfigOption,
    DataArgument,
    LogFileOption,
    VerboseOption,
    choose,
    load_settings,
    run_fit,
    session,
)
from specfit.core.baseline import correct_signal_baseline
from specfit.core.domain.config import BaselineConfig
from specfit.io.data import load_spectrum
from specfit.ui import log_dict, print_summary
from specfit.ui.messages import error, success


def baseline_command(
    data: DataArgument,
    method: Annotated[
        str | None,
        typer.Option("--method", help="Baseline algorithm: als, arpls, snip"),
    ] = None,
    lam: Annotated[
        float | None,
        typer.Option("--lam", help="Smoothness for ALS/arPLS", min=0.0),
    ] = None,
    p: Annotated[
        float | None,
        typer.Option("--p", help="ALS asymmetry", min=0.0, max=1.0),
    ] = None,
    iterations: Annotated[
        int | None,
        typer.Option("--iterations", help="SNIP clipping half-window", min=1),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write x, corrected signal and baseline columns to this file",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    config: ConfigOption = None,
    log_file: LogFileOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Estimate and subtract a baseline.

    Examples
    --------
      arPLS baseline with default settings:
        $ specfit baseline spectrum.csv -o corrected.txt

      SNIP baseline:
        $ specfit baseline spectrum.csv --method snip --iterations 60
    """
    settings = load_settings(config)
    try:
        baseline_config = BaselineConfig.model_validate(
            {
                **settings.baseline.model_dump(),
                "method": choose(method, settings.baseline.method),
                "lam": choose(lam, settings.baseline.lam),
                "p": choose(p, settings.baseline.p),
                "iterations": choose(iterations, settings.baseline.iterations),
            }
        )
    except ValidationError as e:
        error(f"Invalid baseline options:\n{e}")
        raise typer.Exit(1) from e
    options = baseline_config.to_kwargs()

    with session(settings, log_file, verbose):
        spectrum = run_fit(load_spectrum, data)
        log_dict({"file": data, **options})
        _, result = run_fit(correct_signal_baseline, spectrum, **options)

        print_summary(
            {
                "Method": result.method,
                "Points": result.x.size,
                "Baseline range": f"{result.baseline.min():.6g} – {result.baseline.max():.6g}",
                "Corrected range": f"{result.y.min():.6g} – {result.y.max():.6g}",
            },
            title="Baseline Correction",
        )
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            np.savetxt(
                output,
                np.column_stack(tuple(result)),
                header="x corrected baseline",
            )
            success(f"Corrected data written to [path]{output}[/path]")
