"""Peaks command implementation."""

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
from specfit.core.domain.peaks import find_peaks
from specfit.core.fitting.peaks import fit_peaks, fit_ta_spectrum, slice_region
from specfit.io.data import load_spectrum
from specfit.ui import log_dict, print_peak_table


def peaks_command(
    data: DataArgument,
    region: Annotated[
        tuple[float, float] | None,
        typer.Option("--region", "-r", help="Open x interval LO HI to fit"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", help="Peak lineshape: lorentzian, gaussian, pseudo_voigt"),
    ] = None,
    n_peaks: Annotated[
        int | None,
        typer.Option("--n-peaks", "-n", help="Number of peaks", min=1),
    ] = None,
    baseline_order: Annotated[
        int | None,
        typer.Option("--baseline-order", help="Polynomial baseline order", min=0, max=10),
    ] = None,
    ta: Annotated[
        bool,
        typer.Option("--ta", help="Transient absorption spectrum: one ESA and one GSB band"),
    ] = False,
    detect: Annotated[
        bool,
        typer.Option("--detect", help="Print the detected peak candidates before fitting"),
    ] = False,
    config: ConfigOption = None,
    markdown: MarkdownOption = None,
    log_file: LogFileOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Fit overlapping peaks on a polynomial baseline.

    Examples
    --------
      Two Lorentzians in a window:
        $ specfit peaks ftir.csv --region 1950 2150 -n 2

      Transient absorption spectrum with a Markdown summary:
        $ specfit peaks ta.csv --ta --markdown ta.md
    """
    settings = load_settings(config)
    peak_config = settings.peaks
    fit_region = choose(region, peak_config.region)
    fit_model = choose(model, peak_config.model)
    order = choose(baseline_order, peak_config.baseline_order)

    with session(settings, log_file, verbose):
        spectrum = run_fit(load_spectrum, data)

        if detect:
            x, y = run_fit(slice_region, spectrum.x, spectrum.y, fit_region)
            print_peak_table(find_peaks(x, y))

        if ta:
            log_dict({"file": data, "model": fit_model, "region": fit_region, "ta": True})
            result = run_fit(
                fit_ta_spectrum,
                spectrum,
                fit_region,
                model=choose(model, "gaussian"),
                baseline_order=choose(baseline_order, 0),
                confidence=peak_config.confidence,
                solver=settings.solver,
            )
        else:
            log_dict({"file": data, "model": fit_model, "region": fit_region})
            result = run_fit(
                fit_peaks,
                spectrum,
                fit_region,
                model=fit_model,
                n_peaks=choose(n_peaks, peak_config.n_peaks),
                baseline_order=order,
                confidence=peak_config.confidence,
                solver=settings.solver,
            )
        finish(result, markdown)
