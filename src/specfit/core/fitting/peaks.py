"""Multi-peak decomposition fitting.

A spectral region is modelled as the sum of ``n_peaks`` lineshapes plus a
polynomial baseline and fitted in one nonlinear least-squares problem.

Initial guesses are built in three steps:

1. a polynomial through the region edges gives a first baseline,
2. the peak-detection oracle runs on the baseline-subtracted slice and the
   most prominent candidates seed positions, heights and widths,
3. missing peaks are synthesized evenly spaced across the region with the
   height of the local extremum.

After the fit, peaks are sorted by ascending center so that ``result[0]`` is
always the lowest-x peak regardless of how guesses drifted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.polynomial import polynomial

from specfit.core.constants import (
    DEFAULT_BASELINE_ORDER,
    DEFAULT_CONFIDENCE,
    DEFAULT_PEAK_MODEL,
    EDGE_FRACTION,
    MIN_EDGE_POINTS,
    WIDTH_GUESS_FRACTION,
)
from specfit.core.domain.peaks import find_peaks, most_prominent
from specfit.core.domain.signals import require_1d
from specfit.core.fitting.optimizer import fit_parameters
from specfit.core.fitting.parameters import Parameters, ParameterType
from specfit.core.lineshapes.composite import CompositePeakModel
from specfit.core.lineshapes.functions import SIGMA_TO_FWHM
from specfit.core.lineshapes.registry import get_peak_model
from specfit.core.results.peak_results import MultiPeakFitResult, TASpectrumFit
from specfit.core.shared.exceptions import InputDataError, UsageError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from specfit.core.domain.config import SolverConfig
    from specfit.core.domain.peaks import PeakDetector
    from specfit.core.domain.signals import Signal
    from specfit.core.lineshapes.registry import PeakModel
    from specfit.core.shared.typing import ArrayLike, FloatArray

logger = logging.getLogger(__name__)

_PARAM_TYPES = {
    "amplitude": ParameterType.AMPLITUDE,
    "center": ParameterType.CENTER,
    "fwhm": ParameterType.WIDTH,
    "sigma": ParameterType.WIDTH,
    "eta": ParameterType.FRACTION,
}


# =============================================================================
# Data Slicing
# =============================================================================


def slice_region(
    x: ArrayLike, y: ArrayLike, region: tuple[float, float] | None
) -> tuple[FloatArray, FloatArray]:
    """Points with ``lo < x < hi`` and finite values, sorted by x.

    Raises
    ------
        UsageError: If ``x`` and ``y`` differ in length
        InputDataError: If no finite point falls inside the region
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        msg = f"x and y must have equal lengths ({x.size} != {y.size})"
        raise UsageError(msg)

    mask = np.isfinite(x) & np.isfinite(y)
    if region is not None:
        lo, hi = sorted(float(v) for v in region)
        mask &= (x > lo) & (x < hi)
    if not np.any(mask):
        where = f"region {region}" if region is not None else "signal"
        msg = f"No finite data points in {where}"
        raise InputDataError(msg)

    order = np.argsort(x[mask], kind="stable")
    return x[mask][order], y[mask][order]


def _median_step(x: FloatArray) -> float:
    if x.size < 2:
        return 1.0
    step = float(np.median(np.diff(x)))
    return step if step > 0 else 1.0


# =============================================================================
# Initial Guesses
# =============================================================================


def estimate_edge_baseline(x: FloatArray, y: FloatArray, order: int, x_ref: float) -> FloatArray:
    """Polynomial through the first and last points of the slice.

    Returns ``order + 1`` coefficients in ``(x - x_ref)``, constant first.
    """
    n_edge = max(MIN_EDGE_POINTS, int(EDGE_FRACTION * x.size))
    if 2 * n_edge >= x.size:
        index = np.arange(x.size)
    else:
        index = np.concatenate((np.arange(n_edge), np.arange(x.size - n_edge, x.size)))

    degree = min(order, np.unique(x[index]).size - 1)
    coefficients = np.zeros(order + 1)
    coefficients[: degree + 1] = polynomial.polyfit(x[index] - x_ref, y[index], degree)
    return coefficients


def _local_extremum(x: FloatArray, residual: FloatArray, center: float, half_window: float) -> float:
    window = np.abs(x - center) <= half_window
    if not np.any(window):
        window[np.argmin(np.abs(x - center))] = True
    values = residual[window]
    return float(values[np.argmax(np.abs(values))])


def initial_peak_guesses(
    x: FloatArray,
    residual: FloatArray,
    n_peaks: int,
    detector: PeakDetector | None = None,
) -> list[tuple[float, float, float]]:
    """``(amplitude, center, fwhm)`` guesses sorted by center.

    Args:
        x: Abscissa of the slice (sorted)
        residual: Slice with the edge baseline subtracted
        n_peaks: Exact number of guesses to return
        detector: Peak-detection oracle (``find_peaks`` by default)
    """
    detector = detector or find_peaks
    span = float(x[-1] - x[0]) if x.size > 1 else 1.0
    default_width = WIDTH_GUESS_FRACTION * span if span > 0 else 1.0

    candidates = most_prominent(list(detector(x, residual)), n_peaks)
    guesses = [
        (
            _local_extremum(x, residual, c.position, 0.0),
            c.position,
            c.width if np.isfinite(c.width) and c.width > 0 else default_width,
        )
        for c in candidates
    ]

    missing = n_peaks - len(guesses)
    if missing > 0:
        logger.debug("Synthesizing %d peak guesses (detector found %d)", missing, len(guesses))
        positions = np.linspace(x[0], x[-1], missing + 2)[1:-1]
        half_window = 0.5 * span / (missing + 1)
        guesses += [
            (_local_extremum(x, residual, pos, half_window), float(pos), default_width)
            for pos in positions
        ]

    return sorted(guesses, key=lambda guess: guess[1])


def _peak_vector(model: PeakModel, amplitude: float, center: float, fwhm: float) -> list[float]:
    if model.width_name == "sigma":
        return [amplitude, center, fwhm / SIGMA_TO_FWHM, 0.5]
    return [amplitude, center, fwhm]


def _check_p0(p0: ArrayLike, model: PeakModel, n_peaks: int | None) -> tuple[np.ndarray, int]:
    vector = np.asarray(p0, dtype=float).ravel()
    inferred, remainder = divmod(vector.size, model.n_params)
    if remainder or inferred == 0:
        msg = (
            f"p0 has {vector.size} values, not a multiple of the {model.n_params} "
            f"parameters {model.param_names} of model '{model.name}'"
        )
        raise UsageError(msg)
    if n_peaks is not None and n_peaks != inferred:
        msg = f"p0 describes {inferred} peaks but n_peaks={n_peaks}"
        raise UsageError(msg)
    return vector, inferred


# =============================================================================
# Parameter Construction
# =============================================================================


def build_peak_parameters(
    composite: CompositePeakModel,
    peak_vectors: Sequence[Sequence[float]],
    baseline_coefficients: ArrayLike,
    x: FloatArray,
) -> Parameters:
    """Parameters in composite-vector order with bounds derived from the slice."""
    model = composite.peak_model
    step = _median_step(x)
    centers = [vector[1] for vector in peak_vectors]
    center_min = min(float(x[0]), *centers)
    center_max = max(float(x[-1]), *centers)
    width_floor = 1e-3 * step

    params = Parameters()
    names = iter(composite.param_names())
    for vector in peak_vectors:
        for key, value in zip(model.param_names, vector, strict=True):
            param_type = _PARAM_TYPES[key]
            kwargs: dict[str, Any] = {}
            if param_type is ParameterType.CENTER:
                kwargs = {"min": center_min, "max": center_max}
            elif param_type is ParameterType.WIDTH:
                kwargs = {"min": width_floor}
            params.add(next(names), value=value, param_type=param_type, **kwargs)
    for coefficient in np.asarray(baseline_coefficients, dtype=float):
        params.add(next(names), value=coefficient, param_type=ParameterType.BASELINE)
    return params


def _fit_composite(
    composite: CompositePeakModel,
    params: Parameters,
    x: FloatArray,
    y: FloatArray,
    *,
    region: tuple[float, float] | None,
    confidence: float,
    solver: SolverConfig | None,
    sample_id: str,
) -> MultiPeakFitResult:
    fit = fit_parameters(composite, params, x, y, solver=solver)

    # Sort peaks by fitted center, baseline block stays last
    centers = [fit.params[composite.peak_slice(i).start + 1] for i in range(composite.n_peaks)]
    order = np.argsort(centers, kind="stable")
    permutation = [
        index for i in order for index in range(composite.n_params)[composite.peak_slice(i)]
    ]
    permutation += list(range(composite.n_params)[composite.baseline_slice])
    fit = fit.reorder(permutation)

    result = MultiPeakFitResult(
        composite=composite,
        fit=fit,
        x=x,
        y=y,
        region=None if region is None else (float(region[0]), float(region[1])),
        confidence=confidence,
        sample_id=sample_id,
    )
    logger.debug(
        "fit_peaks: %d x %s, R²=%.6f, converged=%s",
        composite.n_peaks,
        composite.peak_model.name,
        result.r_squared,
        result.converged,
    )
    return result


# =============================================================================
# Public API
# =============================================================================


def fit_peaks(
    spectrum: Signal,
    region: tuple[float, float] | None = None,
    *,
    model: str = DEFAULT_PEAK_MODEL,
    n_peaks: int | None = None,
    p0: ArrayLike | None = None,
    baseline_order: int = DEFAULT_BASELINE_ORDER,
    detector: PeakDetector | None = None,
    confidence: float = DEFAULT_CONFIDENCE,
    solver: SolverConfig | None = None,
) -> MultiPeakFitResult:
    """Fit ``n_peaks`` lineshapes plus a polynomial baseline to a spectral region.

    Args:
        spectrum: 1-D signal container
        region: Open interval ``(lo, hi)`` of x to fit; the full signal if None
        model: Peak model name ("lorentzian", "gaussian", "pseudo_voigt")
        n_peaks: Number of peaks; inferred from ``p0`` when omitted, else 1
        p0: Initial peak parameters ``[A1, x01, w1, (eta1), ..., An, x0n, wn, (etan)]``
        baseline_order: Polynomial baseline order (0 = constant)
        detector: Peak-detection oracle used when ``p0`` is not given
        confidence: Confidence level for the reported intervals
        solver: Solver stopping criteria

    Returns
    -------
        MultiPeakFitResult with peaks sorted by ascending center

    Raises
    ------
        UsageError: For matrices, bad model names, p0/n_peaks mismatches,
            negative baseline orders or too few points
        InputDataError: If the region holds no finite data

    Example:
        >>> result = fit_peaks(spectrum, (1950, 2150), model="lorentzian")
        >>> result[0]["center"].value
        2060.0...
    """
    require_1d(spectrum, "fit_peaks")
    peak_model = get_peak_model(model)
    if baseline_order < 0:
        msg = f"baseline_order must be >= 0, got {baseline_order}"
        raise UsageError(msg)
    if n_peaks is not None and n_peaks < 1:
        msg = f"n_peaks must be >= 1, got {n_peaks}"
        raise UsageError(msg)

    if p0 is not None:
        p0_vector, n_peaks = _check_p0(p0, peak_model, n_peaks)
    n_peaks = n_peaks or 1

    x, y = slice_region(spectrum.xdata(), spectrum.ydata(), region)
    x_ref = 0.5 * float(x[0] + x[-1])
    composite = CompositePeakModel(peak_model, n_peaks, baseline_order, x_ref)
    baseline = estimate_edge_baseline(x, y, baseline_order, x_ref)

    if p0 is not None:
        k = peak_model.n_params
        vectors = [list(p0_vector[i * k : (i + 1) * k]) for i in range(n_peaks)]
        vectors.sort(key=lambda vector: vector[1])
    else:
        residual = y - polynomial.polyval(x - x_ref, baseline)
        guesses = initial_peak_guesses(x, residual, n_peaks, detector)
        vectors = [_peak_vector(peak_model, *guess) for guess in guesses]

    params = build_peak_parameters(composite, vectors, baseline, x)
    logger.debug("Initial peak parameters:\n%s", params.summary())
    return _fit_composite(
        composite,
        params,
        x,
        y,
        region=region,
        confidence=confidence,
        solver=solver,
        sample_id=spectrum.sample_id,
    )


def fit_ta_spectrum(
    spectrum: Signal,
    region: tuple[float, float] | None = None,
    *,
    model: str = "gaussian",
    baseline_order: int = 0,
    confidence: float = DEFAULT_CONFIDENCE,
    solver: SolverConfig | None = None,
) -> TASpectrumFit:
    """Fit a transient absorption spectrum with one ESA and one GSB band.

    The excited-state absorption (ESA) band is constrained positive and the
    ground-state bleach (GSB) band negative. Guesses start at the largest
    and smallest points of the baseline-subtracted slice.
    """
    require_1d(spectrum, "fit_ta_spectrum")
    peak_model = get_peak_model(model)
    x, y = slice_region(spectrum.xdata(), spectrum.ydata(), region)
    x_ref = 0.5 * float(x[0] + x[-1])
    composite = CompositePeakModel(peak_model, 2, baseline_order, x_ref)
    baseline = estimate_edge_baseline(x, y, baseline_order, x_ref)
    residual = y - polynomial.polyval(x - x_ref, baseline)

    span = float(x[-1] - x[0]) if x.size > 1 else 1.0
    width = WIDTH_GUESS_FRACTION * span if span > 0 else 1.0
    i_esa, i_gsb = int(np.argmax(residual)), int(np.argmin(residual))
    esa = _peak_vector(peak_model, max(float(residual[i_esa]), 0.0), float(x[i_esa]), width)
    gsb = _peak_vector(peak_model, min(float(residual[i_gsb]), 0.0), float(x[i_gsb]), width)
    vectors = sorted([esa, gsb], key=lambda vector: vector[1])

    params = build_peak_parameters(composite, vectors, baseline, x)
    for i, vector in enumerate(vectors, start=1):
        amplitude = params[f"amplitude_{i}"]
        if vector is esa:
            amplitude.min = 0.0
        else:
            amplitude.max = 0.0

    result = _fit_composite(
        composite,
        params,
        x,
        y,
        region=region,
        confidence=confidence,
        solver=solver,
        sample_id=spectrum.sample_id,
    )
    amplitudes = [peak["amplitude"].value for peak in result]
    esa_index = int(np.argmax(amplitudes))
    return TASpectrumFit(result=result, esa_index=esa_index, gsb_index=1 - esa_index)


__all__ = [
    "build_peak_parameters",
    "estimate_edge_baseline",
    "fit_peaks",
    "fit_ta_spectrum",
    "initial_peak_guesses",
    "slice_region",
]
