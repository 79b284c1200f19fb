"""Baseline correction dispatcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from specfit.core.baseline.penalized import als_baseline, arpls_baseline
from specfit.core.baseline.snip import snip_baseline
from specfit.core.domain.signals import KineticTrace, SignalKind, Spectrum, require_1d
from specfit.core.shared.exceptions import UsageError

if TYPE_CHECKING:
    from collections.abc import Callable

    from specfit.core.domain.signals import Signal
    from specfit.core.shared.typing import ArrayLike, FloatArray

logger = logging.getLogger(__name__)

# Baseline method registry
BASELINE_METHODS: dict[str, Callable[..., FloatArray]] = {
    "als": als_baseline,
    "arpls": arpls_baseline,
    "snip": snip_baseline,
}


@dataclass(frozen=True)
class BaselineResult:
    """Outcome of a baseline correction.

    Attributes
    ----------
        x: Abscissa (sample index when none was given)
        y: Corrected signal, ``input - baseline``
        baseline: Estimated baseline
        method: Name of the algorithm used
    """

    x: FloatArray
    y: FloatArray
    baseline: FloatArray
    method: str

    def __iter__(self):
        # Allows ``x, corrected, baseline = correct_baseline(...)``
        return iter((self.x, self.y, self.baseline))


def estimate_baseline(y: ArrayLike, *, method: str = "arpls", **options: Any) -> FloatArray:
    """Estimate the baseline of ``y`` with the named algorithm.

    Raises
    ------
        UsageError: If ``method`` is unknown or an option is not accepted
    """
    key = method.lower()
    if key not in BASELINE_METHODS:
        available = ", ".join(sorted(BASELINE_METHODS))
        msg = f"Unknown baseline method '{method}'. Available: {available}"
        raise UsageError(msg)
    try:
        return BASELINE_METHODS[key](y, **options)
    except TypeError as exc:
        msg = f"Invalid options for baseline method '{key}': {exc}"
        raise UsageError(msg) from exc


def correct_baseline(
    y: ArrayLike,
    x: ArrayLike | None = None,
    *,
    method: str = "arpls",
    **options: Any,
) -> BaselineResult:
    """Estimate and subtract a baseline.

    Args:
        y: Input signal
        x: Optional abscissa, passed through to the result
        method: "als", "arpls" or "snip"
        **options: Algorithm-specific options (``lam``, ``p``, ``max_iter``,
            ``ratio``, ``tol``, ``iterations``)

    Returns
    -------
        BaselineResult with the corrected signal and the baseline
    """
    y = np.asarray(y, dtype=float)
    x = np.arange(y.size, dtype=float) if x is None else np.asarray(x, dtype=float)
    if x.shape != y.shape:
        msg = f"'x' and 'y' must have equal lengths ({x.size} != {y.size})"
        raise UsageError(msg)

    baseline = estimate_baseline(y, method=method, **options)
    logger.debug("Baseline '%s' estimated on %d points", method, y.size)
    return BaselineResult(x=x, y=y - baseline, baseline=baseline, method=method.lower())


def correct_signal_baseline(
    signal: Signal, *, method: str = "arpls", **options: Any
) -> tuple[Spectrum | KineticTrace, BaselineResult]:
    """Baseline-correct a 1-D signal container.

    Returns
    -------
        A new container of the same kind holding the corrected signal, and
        the full :class:`BaselineResult`
    """
    require_1d(signal, "correct_signal_baseline")
    result = correct_baseline(signal.ydata(), signal.xdata(), method=method, **options)
    metadata = {**signal.metadata, "baseline": result.method}
    if signal.kind is SignalKind.SPECTRUM:
        return Spectrum(result.x, result.y, metadata), result
    return KineticTrace(result.x, result.y, metadata), result


def list_baseline_methods() -> list[str]:
    """List available baseline method names."""
    return sorted(BASELINE_METHODS)


__all__ = [
    "BASELINE_METHODS",
    "BaselineResult",
    "correct_baseline",
    "correct_signal_baseline",
    "estimate_baseline",
    "list_baseline_methods",
]
