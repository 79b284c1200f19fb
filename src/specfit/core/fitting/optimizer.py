"""Nonlinear least-squares fit driver.

This module wraps ``scipy.optimize.least_squares`` (trust-region reflective)
behind a single contract shared by every fitter:

- minimise ``Σ (y - model(params, x))²`` over the varying parameters,
- keep fixed parameters in the full parameter vector,
- report the covariance ``s² (JᵀJ)⁻¹`` with ``s² = RSS / (n - p)``,
- never raise for numerical trouble; flag it instead.

Singular, ill-conditioned and zero-dof problems yield NaN covariance entries.
A solver that stops before meeting its tolerances returns ``converged=False``
and emits a :class:`ConvergenceWarning`.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import numpy as np
from scipy.optimize import least_squares
from scipy.stats import t as student_t

from specfit.core.constants import DEFAULT_CONFIDENCE, ILL_CONDITIONED_LIMIT
from specfit.core.domain.config import SolverConfig
from specfit.core.results.estimates import ParameterEstimate
from specfit.core.shared.exceptions import ConvergenceWarning, UsageError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from specfit.core.fitting.parameters import Parameters
    from specfit.core.shared.typing import ArrayLike, FloatArray, ModelFunction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptimizationResult:
    """Outcome of a least-squares fit.

    All per-parameter arrays follow the full parameter vector, fixed
    parameters included. Fixed parameters have zero covariance rows/columns.

    Attributes
    ----------
        params: Best-fit full parameter vector
        covariance: Full covariance matrix (NaN where unavailable)
        stderr: Standard errors, ``sqrt(diag(covariance))``
        converged: Whether the solver met its convergence criteria
        rss: Residual sum of squares
        residuals: ``y - model(params, x)`` at the solution
        n_data: Number of data points
        n_varying: Number of varying parameters
        dof: Degrees of freedom, ``n_data - n_varying``
        nfev: Number of function evaluations
        message: Solver status message
        names: Parameter names
        vary: Boolean mask of varying parameters
        lower: Lower bounds
        upper: Upper bounds
    """

    params: FloatArray
    covariance: FloatArray
    stderr: FloatArray
    converged: bool
    rss: float
    residuals: FloatArray
    n_data: int
    n_varying: int
    dof: int
    nfev: int
    message: str
    names: tuple[str, ...]
    vary: np.ndarray
    lower: FloatArray
    upper: FloatArray

    @property
    def has_covariance(self) -> bool:
        """True when every varying parameter has a finite standard error."""
        return bool(np.all(np.isfinite(self.stderr[self.vary])))

    def t_value(self, level: float = DEFAULT_CONFIDENCE) -> float:
        """Two-sided Student-t quantile for ``level`` at the fit's dof."""
        if not 0.0 < level < 1.0:
            msg = f"Confidence level must lie in (0, 1), got {level}"
            raise UsageError(msg)
        if self.dof <= 0:
            return np.nan
        return float(student_t.ppf(0.5 + level / 2.0, self.dof))

    def confidence_intervals(self, level: float = DEFAULT_CONFIDENCE) -> FloatArray:
        """Confidence intervals, shape ``(n_params, 2)``.

        Fixed parameters get the degenerate interval ``(value, value)``.
        """
        half_width = self.t_value(level) * self.stderr
        half_width = np.where(self.vary, half_width, 0.0)
        return np.column_stack((self.params - half_width, self.params + half_width))

    def index(self, name: str) -> int:
        try:
            return self.names.index(name)
        except ValueError:
            msg = f"Unknown parameter '{name}'. Available: {', '.join(self.names)}"
            raise UsageError(msg) from None

    def estimate(
        self, name: str | int, level: float = DEFAULT_CONFIDENCE, *, label: str | None = None
    ) -> ParameterEstimate:
        """Named estimate ``{value, err, ci}`` for one parameter."""
        i = name if isinstance(name, int) else self.index(name)
        lower, upper = self.confidence_intervals(level)[i]
        return ParameterEstimate(
            name=label or self.names[i],
            value=float(self.params[i]),
            err=float(self.stderr[i]),
            ci=(float(lower), float(upper)),
            is_fixed=not bool(self.vary[i]),
            min_bound=float(self.lower[i]),
            max_bound=float(self.upper[i]),
        )

    def estimates(self, level: float = DEFAULT_CONFIDENCE) -> dict[str, ParameterEstimate]:
        """Estimates for every parameter, keyed by name."""
        return {name: self.estimate(i, level) for i, name in enumerate(self.names)}

    def reorder(self, order: Sequence[int]) -> OptimizationResult:
        """Permute parameter values and covariance, keeping names in place.

        Used to sort peaks by center or components by tau after fitting: the
        slot names stay put while the fitted quantities move.
        """
        order = np.asarray(order, dtype=int)
        return replace(
            self,
            params=self.params[order],
            covariance=self.covariance[np.ix_(order, order)],
            stderr=self.stderr[order],
            vary=self.vary[order],
            lower=self.lower[order],
            upper=self.upper[order],
        )


def _resolve_bounds(
    bounds: tuple[ArrayLike, ArrayLike] | None, n_params: int
) -> tuple[FloatArray, FloatArray]:
    if bounds is None:
        return np.full(n_params, -np.inf), np.full(n_params, np.inf)
    lower = np.broadcast_to(np.asarray(bounds[0], dtype=float), (n_params,)).copy()
    upper = np.broadcast_to(np.asarray(bounds[1], dtype=float), (n_params,)).copy()
    return lower, upper


def _covariance(jac: FloatArray, rss: float, dof: int) -> FloatArray:
    """Covariance of the varying parameters, NaN when it cannot be trusted."""
    n_free = jac.shape[1]
    nan_cov = np.full((n_free, n_free), np.nan)
    if dof <= 0:
        return nan_cov

    # cov = inv(J.T @ J) * s2, where s2 = RSS / (n - p)
    jtj = jac.T @ jac
    condition = np.linalg.cond(jtj)
    if not np.isfinite(condition) or condition > ILL_CONDITIONED_LIMIT:
        logger.debug("JᵀJ ill-conditioned (cond=%.3g), covariance unavailable", condition)
        return nan_cov
    try:
        return np.linalg.inv(jtj) * (rss / dof)
    except np.linalg.LinAlgError:
        return nan_cov


def least_squares_fit(
    model: ModelFunction,
    p0: ArrayLike,
    x: ArrayLike,
    y: ArrayLike,
    *,
    bounds: tuple[ArrayLike, ArrayLike] | None = None,
    vary: ArrayLike | None = None,
    names: Sequence[str] | None = None,
    solver: SolverConfig | None = None,
) -> OptimizationResult:
    """Fit ``model(params, x)`` to ``y`` by nonlinear least squares.

    Args:
        model: Pure model function ``f(params, x) -> y``
        p0: Initial full parameter vector
        x: Independent variable
        y: Observations, same length as ``x``
        bounds: ``(lower, upper)`` arrays (or scalars) for the full vector
        vary: Boolean mask; parameters with ``False`` are held fixed
        names: Parameter names (defaults to ``p0``, ``p1``, ...)
        solver: Solver stopping criteria

    Returns
    -------
        OptimizationResult

    Raises
    ------
        UsageError: On length mismatches, invalid bounds, or fewer data
            points than varying parameters
    """
    solver = solver or SolverConfig()
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        msg = f"x and y must have equal lengths ({x.size} != {y.size})"
        raise UsageError(msg)

    p0 = np.array(p0, dtype=float).ravel()
    n_params = p0.size
    if bounds is not None and any(np.size(b) not in (1, n_params) for b in bounds):
        msg = f"Bounds must have length {n_params} to match the parameter vector"
        raise UsageError(msg)
    lower, upper = _resolve_bounds(bounds, n_params)

    vary_mask = np.ones(n_params, dtype=bool) if vary is None else np.asarray(vary, dtype=bool)
    if vary_mask.shape != (n_params,):
        msg = f"vary mask must have length {n_params}"
        raise UsageError(msg)
    names = tuple(names) if names is not None else tuple(f"p{i}" for i in range(n_params))
    if len(names) != n_params:
        msg = f"Expected {n_params} parameter names, got {len(names)}"
        raise UsageError(msg)

    n_free = int(vary_mask.sum())
    if y.size < n_free:
        msg = f"Not enough data points ({y.size}) for {n_free} free parameters"
        raise UsageError(msg)
    if np.any(lower[vary_mask] >= upper[vary_mask]):
        msg = "Invalid parameter bounds: lower bound >= upper bound"
        raise UsageError(msg)

    full = p0.copy()
    x0 = np.clip(p0[vary_mask], lower[vary_mask], upper[vary_mask])

    def residual_fn(theta: FloatArray) -> FloatArray:
        trial = full.copy()
        trial[vary_mask] = theta
        return np.asarray(model(trial, x), dtype=float) - y

    if not np.all(np.isfinite(residual_fn(x0))):
        msg = "Model is not finite at the initial parameters"
        raise UsageError(msg)

    if n_free == 0:
        fitted = full
        converged, nfev, message = True, 1, "No varying parameters"
        cov_free = np.zeros((0, 0))
        rss = float(np.sum(residual_fn(x0) ** 2))
    else:
        result = least_squares(
            residual_fn,
            x0,
            bounds=(lower[vary_mask], upper[vary_mask]),
            method="trf",
            x_scale="jac",
            ftol=solver.ftol,
            xtol=solver.xtol,
            gtol=solver.gtol,
            max_nfev=solver.max_nfev,
            verbose=0,
        )
        fitted = full.copy()
        fitted[vary_mask] = result.x
        converged, nfev, message = bool(result.success), int(result.nfev), str(result.message)
        rss = float(np.sum(result.fun**2))
        cov_free = _covariance(result.jac, rss, y.size - n_free)

        # Check for convergence issues
        if not converged:
            warnings.warn(
                f"Optimization did not converge: {message}",
                ConvergenceWarning,
                stacklevel=2,
            )

    covariance = np.zeros((n_params, n_params))
    free_idx = np.flatnonzero(vary_mask)
    covariance[np.ix_(free_idx, free_idx)] = cov_free
    diag = np.diag(covariance)
    stderr = np.where(diag >= 0.0, np.sqrt(np.abs(diag)), np.nan)

    logger.debug(
        "least_squares: %d points, %d free params, rss=%.6g, nfev=%d, converged=%s",
        y.size,
        n_free,
        rss,
        nfev,
        converged,
    )

    return OptimizationResult(
        params=fitted,
        covariance=covariance,
        stderr=stderr,
        converged=converged,
        rss=rss,
        residuals=y - np.asarray(model(fitted, x), dtype=float),
        n_data=int(y.size),
        n_varying=n_free,
        dof=int(y.size - n_free),
        nfev=nfev,
        message=message,
        names=names,
        vary=vary_mask,
        lower=lower,
        upper=upper,
    )


def fit_parameters(
    model: ModelFunction,
    params: Parameters,
    x: ArrayLike,
    y: ArrayLike,
    *,
    solver: SolverConfig | None = None,
) -> OptimizationResult:
    """Fit a :class:`Parameters` collection.

    The collection order defines the full parameter vector passed to
    ``model``; parameters with ``vary=False`` are held at their values.
    """
    lower = np.array([param.min for param in params.values()], dtype=float)
    upper = np.array([param.max for param in params.values()], dtype=float)
    return least_squares_fit(
        model,
        params.get_values(),
        x,
        y,
        bounds=(lower, upper),
        vary=params.get_vary_mask(),
        names=params.get_names(),
        solver=solver,
    )


__all__ = ["OptimizationResult", "fit_parameters", "least_squares_fit"]
