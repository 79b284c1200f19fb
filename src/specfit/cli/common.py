"""Helpers shared by the fitting commands.

Each command follows the same session: load the optional TOML
configuration, open the log, run the fit while collecting convergence
warnings, print the report and optionally write Markdown.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer

from specfit.core.domain.config import SpecFitConfig
from specfit.core.shared.exceptions import ConvergenceWarning, SpecFitError
from specfit.io.config import load_config
from specfit.io.markdown import write_markdown
from specfit.ui import close_logging, log, report, setup_logging
from specfit.ui.messages import error, success, warning

T = TypeVar("T")

DataArgument = Annotated[
    Path,
    typer.Argument(
        help="Text file with numeric columns (whitespace or comma separated)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to TOML configuration file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
MarkdownOption = Annotated[
    Path | None,
    typer.Option(
        "--markdown",
        "-m",
        help="Write a Markdown summary of the fit to this file",
        dir_okay=False,
        resolve_path=True,
    ),
]
LogFileOption = Annotated[
    Path | None,
    typer.Option(
        "--log-file",
        help="Write a session log (JSON when the suffix is .json)",
        dir_okay=False,
        resolve_path=True,
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Also print log messages to the console"),
]


def load_settings(config: Path | None) -> SpecFitConfig:
    """Validated configuration, defaults when no file is given."""
    if config is None:
        return SpecFitConfig()
    try:
        return load_config(config)
    except SpecFitError as e:
        error(str(e))
        raise typer.Exit(1) from e


@contextmanager
def session(settings: SpecFitConfig, log_file: Path | None, verbose: bool) -> Iterator[None]:
    """Logging session; CLI ``--log-file`` takes precedence over the config file."""
    setup_logging(
        log_file or settings.logging.file,
        verbose=verbose,
        fmt=settings.logging.format,
    )
    try:
        yield
    finally:
        close_logging()


def run_fit(fit: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a fitter, reporting convergence warnings and exiting on errors."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        try:
            result = fit(*args, **kwargs)
        except SpecFitError as e:
            error(str(e))
            log(str(e), level="error")
            raise typer.Exit(1) from e
    for item in caught:
        if issubclass(item.category, ConvergenceWarning):
            warning(str(item.message))
        else:
            warnings.warn_explicit(item.message, item.category, item.filename, item.lineno)
    return result


def finish(result: Any, markdown: Path | None) -> None:
    """Print the report and write the optional Markdown summary."""
    report(result)
    if markdown is not None:
        write_markdown(result, markdown)
        success(f"Markdown summary written to [path]{markdown}[/path]")


def choose(cli_value: T | None, config_value: T) -> T:
    """CLI value when given, else the configuration value."""
    return config_value if cli_value is None else cli_value
