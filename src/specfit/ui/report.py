"""Console reports for fit results.

Every result record exposes ``title``, ``summary_rows()`` and
``summary_info()``; :func:`report` renders them as rich tables. Global fits
get one table for the shared kinetics and one per trace.
"""

from __future__ import annotations

from typing import Any

from specfit.ui.console import console
from specfit.ui.logging import log_dict, log_section
from specfit.ui.tables import parameter_table, print_summary

__all__ = ["report"]


def _log_rows(rows: list) -> None:
    log_dict({label: estimate.format_value(6) for label, estimate in rows})


def report(result: Any) -> None:
    """Print a fit result to the console and log it.

    Args:
        result: Any peak, TA-spectrum, decay or global fit result
    """
    log_section(result.title)
    if hasattr(result, "shared_rows"):
        shared = result.shared_rows()
        console.print(parameter_table(shared, title=f"{result.title}: shared parameters"))
        _log_rows(shared)
        for j, label in enumerate(result.labels):
            rows = result.trace_rows(j)
            table_title = f"{label} (R² = {result.trace_r_squared[j]:.4f})"
            console.print(parameter_table(rows, title=table_title))
            _log_rows([(f"{label} {name}", est) for name, est in rows])
    else:
        rows = result.summary_rows()
        console.print(parameter_table(rows, title=result.title))
        _log_rows(rows)

    info = result.summary_info()
    print_summary(info, title="Fit Statistics")
    log_dict(info)
    if not getattr(result, "converged", True):
        console.print("[warning]⚠ The solver stopped before converging[/warning]")
