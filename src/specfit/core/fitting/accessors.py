"""Module-level accessors for fit results.

Each accessor delegates to the result's own method, so the evaluation always
matches the model that was fitted (piecewise or IRF-convolved kinetics,
peak sums with the fitted baseline reference).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from specfit.core.results.peak_results import MultiPeakFitResult
    from specfit.core.shared.typing import FloatArray


def predict(result: Any, x: Any = None) -> FloatArray | list[FloatArray]:
    """Evaluate a fit result's model.

    ``x`` may be an array, a signal container, or for global fits a sequence
    of traces. The fitted axis is used when ``x`` is None.
    """
    return result.predict(x)


def predict_peak(result: MultiPeakFitResult, index: int, x: Any = None) -> FloatArray:
    """One peak of a decomposition fit, without baseline."""
    return result.predict_peak(index, x)


def predict_baseline(result: MultiPeakFitResult, x: Any = None) -> FloatArray:
    """Polynomial baseline of a decomposition fit."""
    return result.predict_baseline(x)


def residuals(result: Any, *args: Any) -> FloatArray | list[FloatArray]:
    """Residuals ``data - model`` over the fitted data."""
    return result.residuals(*args)


__all__ = ["predict", "predict_baseline", "predict_peak", "residuals"]
