"""Goodness-of-fit numbers shared by every fitter."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from specfit.core.shared.typing import FloatArray


def compute_rss(residuals: FloatArray) -> float:
    """Residual sum of squares.

    This is the single source of truth for RSS calculation.
    """
    return float(np.sum(np.square(residuals)))


def compute_total_sum_of_squares(y: FloatArray) -> float:
    """Sum of squared deviations of ``y`` from its mean."""
    y = np.asarray(y, dtype=float)
    return float(np.sum(np.square(y - y.mean()))) if y.size else 0.0


def compute_r_squared(rss: float, total: float) -> float:
    """Coefficient of determination ``1 - RSS / TSS``.

    Returns NaN for a constant signal (zero total sum of squares).
    """
    if total <= 0.0:
        return np.nan
    return 1.0 - rss / total


__all__ = [
    "compute_r_squared",
    "compute_rss",
    "compute_total_sum_of_squares",
]
