"""Markdown summaries of fit results.

Every result record exposes ``title``, ``summary_rows()`` and
``summary_info()``; the generators below turn that interface into a
``| Parameter | Value | Error |`` table followed by the fit statistics.
Global fits get a shared-parameter section and one section per trace.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from specfit.core.results.decay_results import GlobalFitResult
    from specfit.core.results.estimates import ParameterEstimate


def format_float(value: float, precision: int = 6, scientific_threshold: int = 4) -> str:
    """Format a float, switching to scientific notation for extreme magnitudes."""
    if value == 0:
        return f"{0:.{precision}f}"
    if math.isinf(value) or math.isnan(value):
        return str(value)
    if abs(math.log10(abs(value))) > scientific_threshold:
        return f"{value:.{precision}e}"
    return f"{value:.{precision}f}"


def _format_error(estimate: ParameterEstimate, precision: int) -> str:
    if estimate.is_fixed:
        return "fixed"
    if not estimate.has_uncertainty:
        return "n/a"
    return format_float(estimate.err, precision)


def parameter_table(rows: Sequence[tuple[str, ParameterEstimate]], precision: int = 4) -> str:
    """Markdown table of ``(label, estimate)`` rows."""
    lines = [
        "| Parameter | Value | Error |",
        "|-----------|-------|-------|",
    ]
    for label, estimate in rows:
        value = format_float(estimate.value, precision)
        lines.append(f"| {label} | {value} | {_format_error(estimate, precision)} |")
    return "\n".join(lines)


def _statistics_lines(info: dict[str, str]) -> list[str]:
    lines = []
    for key in ("R²", "RSS"):
        if key in info:
            lines.append(f"- **{key}:** {info[key]}")
    lines += [f"- **{key}:** {value}" for key, value in info.items() if key not in ("R²", "RSS")]
    return lines


def _format_global(result: GlobalFitResult, precision: int) -> str:
    lines = [f"## {result.title}", "", "### Shared parameters", ""]
    lines.append(parameter_table(result.shared_rows(), precision))
    for j, label in enumerate(result.labels):
        lines += ["", f"### {label}", ""]
        lines.append(parameter_table(result.trace_rows(j), precision))
        lines.append("")
        lines.append(f"- **R²:** {result.trace_r_squared[j]:.6f}")
    lines += ["", "### Statistics", ""]
    lines += _statistics_lines(result.summary_info())
    return "\n".join(lines)


def format_results(result: Any, precision: int = 4) -> str:
    """Format any fit result as Markdown.

    Args:
        result: A peak, decay, TA-spectrum or global fit result
        precision: Decimal places for values and errors

    Returns
    -------
        Markdown text starting with a ``## <title>`` heading

    Example:
        >>> print(format_results(fit_exp_decay(trace)))
        ## Exponential Decay
        ...
    """
    if hasattr(result, "shared_rows"):
        return _format_global(result, precision)

    lines = [f"## {result.title}", ""]
    lines.append(parameter_table(result.summary_rows(), precision))
    info = result.summary_info()
    if info:
        lines.append("")
        lines += _statistics_lines(info)
    return "\n".join(lines)


def write_markdown(result: Any, path: Path, precision: int = 4) -> None:
    """Write :func:`format_results` output to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_results(result, precision) + "\n", encoding="utf-8")


__all__ = ["format_float", "format_results", "parameter_table", "write_markdown"]
