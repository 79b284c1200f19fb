"""Penalized least-squares baselines (ALS and arPLS).

Both estimators solve the Whittaker smoother

    (W + λ DᵀD) z = W y

with D the second-difference operator, re-weighting the points after each
solve. ALS uses a fixed asymmetric weight; arPLS derives logistic weights
from the statistics of the negative residuals.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import spsolve

from specfit.core.constants import (
    ALS_LAMBDA,
    ALS_MAX_ITER,
    ALS_P,
    ARPLS_LAMBDA,
    ARPLS_MAX_ITER,
    ARPLS_RATIO,
)

if TYPE_CHECKING:
    from specfit.core.shared.typing import ArrayLike, FloatArray

logger = logging.getLogger(__name__)

# Largest argument passed to exp() in the logistic weights
_EXP_LIMIT = 700.0


def _difference_penalty(n_points: int, lam: float) -> sparse.csc_matrix:
    """Return λ DᵀD for the second-difference operator D of shape (n-2, n)."""
    diff = sparse.diags([1.0, -2.0, 1.0], [0, 1, 2], shape=(n_points - 2, n_points))
    return (lam * (diff.T @ diff)).tocsc()


def _solve_weighted(y: FloatArray, weights: FloatArray, penalty: sparse.csc_matrix) -> FloatArray:
    system = (sparse.diags(weights, 0) + penalty).tocsc()
    return np.asarray(spsolve(system, weights * y), dtype=float)


def als_baseline(
    y: ArrayLike,
    lam: float = ALS_LAMBDA,
    p: float = ALS_P,
    max_iter: int = ALS_MAX_ITER,
    tol: float | None = None,
) -> FloatArray:
    """Estimate a baseline with asymmetric least squares.

    Args:
        y: Input signal
        lam: Smoothness parameter (larger = smoother)
        p: Asymmetry; points above the baseline get weight ``p``, points
            below get ``1 - p``
        max_iter: Number of re-weighting iterations
        tol: Stop early once no weight changes by more than ``tol``

    Returns
    -------
        Baseline with the same length as ``y``
    """
    y = np.asarray(y, dtype=float)
    if y.size < 3:
        return y.copy()

    penalty = _difference_penalty(y.size, lam)
    weights = np.ones(y.size)
    z = y.copy()
    for iteration in range(max_iter):
        z = _solve_weighted(y, weights, penalty)
        new_weights = np.where(y > z, p, 1.0 - p)
        if tol is not None and np.max(np.abs(new_weights - weights)) <= tol:
            logger.debug("ALS converged after %d iterations", iteration + 1)
            break
        weights = new_weights
    return z


def arpls_baseline(
    y: ArrayLike,
    lam: float = ARPLS_LAMBDA,
    max_iter: int = ARPLS_MAX_ITER,
    ratio: float = ARPLS_RATIO,
) -> FloatArray:
    """Estimate a baseline with asymmetrically reweighted penalized least squares.

    Weights follow ``1 / (1 + exp(2 (d - (2s - m)) / s))`` where ``d`` is the
    residual ``y - z`` and ``m``, ``s`` are the mean and standard deviation
    of the negative residuals.

    Args:
        y: Input signal
        lam: Smoothness parameter
        max_iter: Maximum number of re-weighting iterations
        ratio: Stop once the relative change of the weight vector drops below

    Returns
    -------
        Baseline with the same length as ``y``
    """
    y = np.asarray(y, dtype=float)
    if y.size < 3:
        return y.copy()

    penalty = _difference_penalty(y.size, lam)
    weights = np.ones(y.size)
    z = y.copy()
    for iteration in range(max_iter):
        z = _solve_weighted(y, weights, penalty)
        residual = y - z
        negative = residual[residual < 0]
        if negative.size == 0:
            break
        mean, spread = negative.mean(), negative.std()
        if spread == 0.0:
            break
        exponent = np.clip(2.0 * (residual - (2.0 * spread - mean)) / spread, -_EXP_LIMIT, _EXP_LIMIT)
        new_weights = 1.0 / (1.0 + np.exp(exponent))
        change = np.linalg.norm(weights - new_weights) / np.linalg.norm(weights)
        weights = new_weights
        if change < ratio:
            logger.debug("arPLS converged after %d iterations", iteration + 1)
            break
    return z


__all__ = ["als_baseline", "arpls_baseline"]
