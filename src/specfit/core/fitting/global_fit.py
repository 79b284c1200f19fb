"""Global fitting of several kinetic traces with shared time constants.

All traces are stacked into one residual vector: the time constants, t0 and
the IRF width are shared, while every trace keeps its own amplitudes and
offset. The driver is invoked once over the concatenated problem, so the
shared parameters see the information of every trace.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from specfit.core.constants import DEFAULT_CONFIDENCE
from specfit.core.domain.signals import require_1d
from specfit.core.fitting.decay import component_basis, fit_exp_decay, median_time_step
from specfit.core.fitting.optimizer import fit_parameters
from specfit.core.fitting.parameters import Parameters, ParameterType
from specfit.core.fitting.peaks import slice_region
from specfit.core.lineshapes.composite import GlobalDecayModel
from specfit.core.results.decay_results import GlobalFitResult
from specfit.core.shared.exceptions import UsageError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from specfit.core.domain.config import SolverConfig
    from specfit.core.domain.signals import Signal
    from specfit.core.results.decay_results import ExpDecayFit
    from specfit.core.shared.typing import FloatArray

logger = logging.getLogger(__name__)


def _resolve_labels(labels: Sequence[str] | None, n_traces: int) -> tuple[str, ...]:
    if labels is None:
        return tuple(f"trace {j + 1}" for j in range(n_traces))
    if len(labels) != n_traces:
        msg = f"Got {len(labels)} labels for {n_traces} traces"
        raise UsageError(msg)
    return tuple(str(label) for label in labels)


def build_global_parameters(
    model: GlobalDecayModel,
    seed: ExpDecayFit,
    times: Sequence[FloatArray],
    signals: Sequence[FloatArray],
) -> Parameters:
    """Parameters in :class:`GlobalDecayModel` order.

    Shared kinetics come from ``seed``; each trace's amplitudes and offset
    are solved linearly with those kinetics held fixed.
    """
    t_all = np.concatenate(times)
    dt = min(median_time_step(t) for t in times)
    span = float(t_all.max() - t_all.min())
    taus = tuple(float(tau) for tau in seed.taus)
    sigma = seed.sigma if model.irf else 0.0

    params = Parameters()
    for i, tau in enumerate(taus, 1):
        params.add(f"tau_{i}", value=tau, min=1e-3 * dt, param_type=ParameterType.TAU)
    if model.irf:
        params.add(
            "t0", value=seed.t0, min=float(t_all.min()), max=float(t_all.max()),
            param_type=ParameterType.TIME_ZERO,
        )
        params.add(
            "sigma", value=sigma, min=1e-3 * dt, max=max(span, sigma),
            param_type=ParameterType.IRF_WIDTH,
        )
    else:
        params.add("t0", value=seed.t0, vary=False, param_type=ParameterType.TIME_ZERO)

    for j, (t, s) in enumerate(zip(times, signals, strict=True), 1):
        basis = component_basis(t, taus, seed.t0, sigma, model.irf)
        coefficients, *_ = np.linalg.lstsq(basis, s, rcond=None)
        for i, amplitude in enumerate(coefficients[:-1], 1):
            params.add(
                f"trace{j}_amplitude_{i}", value=float(amplitude),
                param_type=ParameterType.AMPLITUDE,
            )
        params.add(
            f"trace{j}_offset", value=float(coefficients[-1]), param_type=ParameterType.OFFSET
        )
    return params


def global_tau_order(params: FloatArray, model: GlobalDecayModel) -> list[int]:
    """Permutation sorting taus ascending, moving every trace's amplitudes along."""
    order = np.argsort(params[: model.n_exp], kind="stable").tolist()
    permutation = order + list(range(model.n_exp, model.n_shared))
    for j in range(model.n_traces):
        start = model.trace_slice(j).start
        permutation += [start + i for i in order]
        permutation.append(start + model.n_exp)
    return permutation


def fit_global(
    traces: Sequence[Signal],
    *,
    labels: Sequence[str] | None = None,
    n_exp: int = 1,
    irf: bool = True,
    irf_width: float | None = None,
    t_start: float | None = None,
    confidence: float = DEFAULT_CONFIDENCE,
    solver: SolverConfig | None = None,
) -> GlobalFitResult:
    """Fit several kinetic traces with shared time constants, t0 and IRF width.

    Args:
        traces: 1-D kinetic traces, each on its own time axis
        labels: One label per trace; ``"trace 1"``, ... if None
        n_exp: Number of shared exponential components
        irf: Convolve with a Gaussian instrument response
        irf_width: Initial IRF sigma
        t_start: Pinned t0 for fits without IRF
        confidence: Confidence level for the reported intervals
        solver: Solver stopping criteria

    Returns
    -------
        GlobalFitResult with taus sorted ascending

    Raises
    ------
        UsageError: For an empty trace list, a label count mismatch, matrices,
            or any argument :func:`fit_exp_decay` rejects
    """
    traces = list(traces)
    if not traces:
        msg = "fit_global needs at least one trace"
        raise UsageError(msg)
    resolved_labels = _resolve_labels(labels, len(traces))
    for trace in traces:
        require_1d(trace, "fit_global")

    sliced = [slice_region(trace.xdata(), trace.ydata(), None) for trace in traces]
    times = tuple(t for t, _ in sliced)
    signals = tuple(s for _, s in sliced)

    # Kinetics are seeded from the strongest trace
    strongest = int(np.argmax([np.max(np.abs(s)) for s in signals]))
    logger.debug("Seeding global kinetics from %s", resolved_labels[strongest])
    seed = fit_exp_decay(
        traces[strongest],
        n_exp=n_exp,
        irf=irf,
        irf_width=irf_width,
        t_start=t_start,
        confidence=confidence,
        solver=solver,
    )

    model = GlobalDecayModel(n_exp, irf, tuple(t.size for t in times))
    params = build_global_parameters(model, seed, times, signals)
    fit = fit_parameters(
        model, params, np.concatenate(times), np.concatenate(signals), solver=solver
    )
    fit = fit.reorder(global_tau_order(fit.params, model))

    result = GlobalFitResult(
        model=model,
        fit=fit,
        times=times,
        signals=signals,
        labels=resolved_labels,
        confidence=confidence,
    )
    logger.debug(
        "fit_global: %d traces, taus=%s, R²=%.6f, converged=%s",
        result.n_traces,
        np.array2string(result.taus, precision=4),
        result.r_squared,
        result.converged,
    )
    return result


__all__ = ["build_global_parameters", "fit_global", "global_tau_order"]
