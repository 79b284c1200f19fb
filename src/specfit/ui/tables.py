"""UI tables for displaying structured data.

This module provides functions for creating and displaying Rich tables
with consistent styling across the application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich import box
from rich.table import Table

from specfit.ui.console import console

if TYPE_CHECKING:
    from collections.abc import Sequence

    from specfit.core.domain.peaks import PeakCandidate
    from specfit.core.results.estimates import ParameterEstimate

__all__ = [
    "create_table",
    "parameter_table",
    "print_peak_table",
    "print_summary",
]


def create_table(title: str | None = None, show_header: bool = True) -> Table:
    """Create a standard table with consistent styling.

    Args:
        title: Optional table title
        show_header: Whether to show table header

    Returns
    -------
        Configured Table instance
    """
    return Table(
        title=title,
        title_style="header" if title else None,
        box=box.ROUNDED,
        show_header=show_header,
        header_style="bold cyan",
        border_style="dim",
    )


def print_summary(items: dict[str, Any], title: str = "Summary") -> None:
    """Print a standard two-column summary table.

    Args:
        items: Dictionary of key-value pairs to display
        title: Table title
    """
    table = create_table(title, show_header=False)
    table.add_column("Item", style="metric")
    table.add_column("Value", style="value")

    for key, value in items.items():
        table.add_row(key, str(value))

    console.print(table)


def _error_cell(estimate: ParameterEstimate, precision: int) -> str:
    if estimate.is_fixed:
        return "[dim]fixed[/dim]"
    if not estimate.has_uncertainty:
        return "[warning]n/a[/warning]"
    return f"{estimate.err:.{precision}g}"


def parameter_table(
    rows: Sequence[tuple[str, ParameterEstimate]],
    title: str | None = None,
    precision: int = 6,
) -> Table:
    """Table of ``(label, estimate)`` rows with value, error and interval."""
    table = create_table(title)
    table.add_column("Parameter", style="param")
    table.add_column("Value", style="number", justify="right")
    table.add_column("Error", justify="right")
    table.add_column("Interval", style="dim", justify="right")

    for label, estimate in rows:
        lower, upper = estimate.ci
        interval = f"[{lower:.{precision}g}, {upper:.{precision}g}]"
        flag = " [warning]⚠[/warning]" if estimate.is_at_boundary() else ""
        table.add_row(
            label + flag,
            f"{estimate.value:.{precision}g}",
            _error_cell(estimate, precision),
            interval if estimate.has_uncertainty else "",
        )
    return table


def print_peak_table(candidates: Sequence[PeakCandidate], title: str = "Detected Peaks") -> None:
    """Print detected peak candidates sorted by position."""
    table = create_table(title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Position", style="number", justify="right")
    table.add_column("Intensity", justify="right")
    table.add_column("Prominence", justify="right")
    table.add_column("Width", justify="right")

    for i, peak in enumerate(candidates, 1):
        table.add_row(
            str(i),
            f"{peak.position:.6g}",
            f"{peak.intensity:.6g}",
            f"{peak.prominence:.4g}",
            f"{peak.width:.4g}",
        )
    console.print(table)
