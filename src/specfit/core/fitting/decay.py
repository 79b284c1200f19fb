"""Exponential-decay fitting for time-resolved kinetics.

Mode matrix:

| IRF | Parameter vector                          | t0                         |
|-----|-------------------------------------------|----------------------------|
| off | ``[A_1, tau_1, ..., t0, offset]``         | pinned (t_start or peak)   |
| on  | ``[A_1, tau_1, ..., t0, sigma, offset]``  | fitted with the IRF width  |

Initial guesses follow a variable-projection idea: for every candidate set of
time constants on a logarithmic grid, amplitudes and offset enter the model
linearly and are solved exactly; the candidate with the smallest residual
seeds the nonlinear fit.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from specfit.core.constants import DEFAULT_CONFIDENCE, TAU_GRID_MAX_EXP, TAU_GRID_POINTS
from specfit.core.domain.signals import require_1d
from specfit.core.fitting.optimizer import fit_parameters
from specfit.core.fitting.parameters import Parameters, ParameterType
from specfit.core.fitting.peaks import slice_region
from specfit.core.lineshapes.composite import MultiExponentialModel
from specfit.core.results.decay_results import ExpDecayFit
from specfit.core.shared.exceptions import UsageError

if TYPE_CHECKING:
    from specfit.core.domain.config import SolverConfig
    from specfit.core.domain.signals import Signal
    from specfit.core.shared.typing import FloatArray

logger = logging.getLogger(__name__)

# Fraction of the leading points used to estimate the pre-signal level
_LEAD_FRACTION = 0.05
_MIN_LEAD_POINTS = 3


@dataclass(frozen=True, slots=True)
class DecayGuess:
    """Initial values for a multi-exponential fit (taus ascending)."""

    amplitudes: tuple[float, ...]
    taus: tuple[float, ...]
    t0: float
    sigma: float
    offset: float


def median_time_step(t: FloatArray) -> float:
    if t.size < 2:
        return 1.0
    step = float(np.median(np.diff(t)))
    return step if step > 0 else 1.0


def _leading_level(s: FloatArray) -> float:
    n_lead = max(_MIN_LEAD_POINTS, int(_LEAD_FRACTION * s.size))
    return float(np.median(s[:n_lead]))


def estimate_time_zero(t: FloatArray, s: FloatArray, offset: float) -> float:
    """Half-rise time: first point where ``|s - offset|`` reaches half its maximum."""
    deviation = np.abs(s - offset)
    peak = deviation.max()
    if peak == 0.0:
        return float(t[0])
    return float(t[np.argmax(deviation >= 0.5 * peak)])


def component_basis(
    t: FloatArray, taus: tuple[float, ...], t0: float, sigma: float, irf: bool
) -> FloatArray:
    """Unit-amplitude components plus a constant column."""
    model = MultiExponentialModel(len(taus), irf)
    params = np.zeros(model.n_params)
    params[1 : 2 * len(taus) : 2] = taus
    params[model.t0_index] = t0
    if irf:
        params[model.sigma_index] = sigma
    columns = []
    for i in range(len(taus)):
        params[2 * i] = 1.0
        columns.append(model.component(i, params, t))
        params[2 * i] = 0.0
    columns.append(np.ones_like(t))
    return np.column_stack(columns)


def tau_grid(t: FloatArray, t0: float, n_points: int = TAU_GRID_POINTS) -> FloatArray:
    """Logarithmic grid of candidate time constants for the trace."""
    dt = median_time_step(t)
    span = float(t[-1] - t0)
    if span <= 2.0 * dt:
        span = float(t[-1] - t[0])
    low = 2.0 * dt if 2.0 * dt < span else span / 10.0
    return np.geomspace(low, span, n_points)


def grid_search_taus(
    t: FloatArray,
    s: FloatArray,
    n_exp: int,
    t0: float,
    sigma: float,
    irf: bool,
) -> tuple[tuple[float, ...], FloatArray, float]:
    """Best time constants on the grid with amplitudes and offset solved linearly.

    Returns
    -------
        ``(taus, amplitudes, offset)`` with taus ascending
    """
    if n_exp > TAU_GRID_MAX_EXP:
        candidates = [tuple(tau_grid(t, t0, n_exp))]
    else:
        candidates = itertools.combinations(tau_grid(t, t0), n_exp)

    best: tuple[float, tuple[float, ...], FloatArray] | None = None
    for taus in candidates:
        basis = component_basis(t, taus, t0, sigma, irf)
        coefficients, *_ = np.linalg.lstsq(basis, s, rcond=None)
        rss = float(np.sum((basis @ coefficients - s) ** 2))
        if best is None or rss < best[0]:
            best = (rss, tuple(float(tau) for tau in taus), coefficients)

    _, taus, coefficients = best
    logger.debug("Grid search picked taus=%s", taus)
    return taus, coefficients[:-1], float(coefficients[-1])


def initial_decay_guess(
    t: FloatArray,
    s: FloatArray,
    *,
    n_exp: int,
    irf: bool,
    irf_width: float | None = None,
    t_start: float | None = None,
) -> DecayGuess:
    """Deterministic initial values for :func:`fit_exp_decay`."""
    dt = median_time_step(t)
    sigma = irf_width if irf_width is not None else 2.0 * dt

    level = _leading_level(s)
    t_peak = float(t[np.argmax(np.abs(s - level))])
    pre = t < t_peak - 2.0 * sigma
    offset = float(np.mean(s[pre])) if np.count_nonzero(pre) >= _MIN_LEAD_POINTS else 0.0

    if irf:
        t0 = estimate_time_zero(t, s, offset)
    else:
        t0 = float(t_start) if t_start is not None else t_peak

    taus, amplitudes, offset = grid_search_taus(t, s, n_exp, t0, sigma, irf)
    return DecayGuess(
        amplitudes=tuple(float(a) for a in amplitudes),
        taus=taus,
        t0=t0,
        sigma=float(sigma),
        offset=offset,
    )


def build_decay_parameters(
    model: MultiExponentialModel, guess: DecayGuess, t: FloatArray
) -> Parameters:
    """Parameters in :class:`MultiExponentialModel` order.

    Without IRF, ``t0`` is held fixed at the guessed (pinned) value.
    """
    dt = median_time_step(t)
    span = float(t[-1] - t[0]) if t.size > 1 else 1.0

    params = Parameters()
    for i, (amplitude, tau) in enumerate(zip(guess.amplitudes, guess.taus, strict=True), 1):
        params.add(f"amplitude_{i}", value=amplitude, param_type=ParameterType.AMPLITUDE)
        params.add(f"tau_{i}", value=tau, min=1e-3 * dt, param_type=ParameterType.TAU)
    if model.irf:
        params.add(
            "t0", value=guess.t0, min=float(t[0]), max=float(t[-1]),
            param_type=ParameterType.TIME_ZERO,
        )
        params.add(
            "sigma", value=guess.sigma, min=1e-3 * dt, max=max(span, guess.sigma),
            param_type=ParameterType.IRF_WIDTH,
        )
    else:
        params.add("t0", value=guess.t0, vary=False, param_type=ParameterType.TIME_ZERO)
    params.add("offset", value=guess.offset, param_type=ParameterType.OFFSET)
    return params


def tau_order(params: FloatArray, n_exp: int, n_params: int) -> list[int]:
    """Permutation sorting ``[A_i, tau_i]`` pairs by ascending tau."""
    order = np.argsort(params[1 : 2 * n_exp : 2], kind="stable")
    permutation = [k for i in order for k in (2 * i, 2 * i + 1)]
    return permutation + list(range(2 * n_exp, n_params))


def fit_exp_decay(
    trace: Signal,
    *,
    n_exp: int = 1,
    irf: bool = True,
    irf_width: float | None = None,
    t_start: float | None = None,
    confidence: float = DEFAULT_CONFIDENCE,
    solver: SolverConfig | None = None,
) -> ExpDecayFit:
    """Fit a sum of ``n_exp`` exponential decays to a kinetic trace.

    Args:
        trace: 1-D kinetic trace
        n_exp: Number of exponential components
        irf: Convolve with a Gaussian instrument response (fits t0 and sigma)
        irf_width: Initial IRF sigma; twice the median time step if None
        t_start: Time zero for fits without IRF; the time of the largest
            signal if None. Without IRF t0 is held fixed, so each amplitude
            is the signal of its component at that pinned t0 rather than at
            the true onset
        confidence: Confidence level for the reported intervals
        solver: Solver stopping criteria

    Returns
    -------
        ExpDecayFit with components sorted by ascending tau

    Raises
    ------
        UsageError: For matrices, ``n_exp < 1``, non-positive ``irf_width``,
            ``t_start`` combined with ``irf=True`` or too few points
        InputDataError: If the trace holds no finite data

    Example:
        >>> fit = fit_exp_decay(trace, n_exp=2)
        >>> fit.taus
        array([ 1.49...,  15.1...])
    """
    require_1d(trace, "fit_exp_decay")
    if n_exp < 1:
        msg = f"n_exp must be >= 1, got {n_exp}"
        raise UsageError(msg)
    if irf and t_start is not None:
        msg = "t_start pins t0 for fits without IRF; it cannot be combined with irf=True"
        raise UsageError(msg)
    if irf_width is not None and irf_width <= 0:
        msg = f"irf_width must be positive, got {irf_width}"
        raise UsageError(msg)

    t, s = slice_region(trace.xdata(), trace.ydata(), None)
    model = MultiExponentialModel(n_exp, irf)
    if t.size < model.n_params:
        msg = f"Not enough data points ({t.size}) for {model.n_params} parameters"
        raise UsageError(msg)

    guess = initial_decay_guess(
        t, s, n_exp=n_exp, irf=irf, irf_width=irf_width, t_start=t_start
    )
    params = build_decay_parameters(model, guess, t)
    logger.debug("Initial decay parameters:\n%s", params.summary())

    fit = fit_parameters(model, params, t, s, solver=solver)
    fit = fit.reorder(tau_order(fit.params, n_exp, model.n_params))
    result = ExpDecayFit(
        model=model,
        fit=fit,
        time=t,
        signal=s,
        confidence=confidence,
        sample_id=trace.sample_id,
    )
    logger.debug(
        "fit_exp_decay: taus=%s, R²=%.6f, converged=%s",
        np.array2string(result.taus, precision=4),
        result.r_squared,
        result.converged,
    )
    return result


__all__ = [
    "DecayGuess",
    "build_decay_parameters",
    "component_basis",
    "estimate_time_zero",
    "fit_exp_decay",
    "grid_search_taus",
    "initial_decay_guess",
    "median_time_step",
    "tau_grid",
    "tau_order",
]
