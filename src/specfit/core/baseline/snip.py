"""SNIP (statistics-sensitive non-linear iterative peak clipping) baseline."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from specfit.core.constants import SNIP_ITERATIONS

if TYPE_CHECKING:
    from specfit.core.shared.typing import ArrayLike, FloatArray


def snip_baseline(y: ArrayLike, iterations: int = SNIP_ITERATIONS) -> FloatArray:
    """Estimate a baseline by iterative peak clipping.

    For ``k`` from ``iterations`` down to 1 every interior point is replaced by
    ``min(z[i], (z[i-k] + z[i+k]) / 2)``. Points closer than ``k`` to either
    end are left untouched at that step.

    Args:
        y: Input signal
        iterations: Largest clipping half-window, in points

    Returns
    -------
        Baseline with the same length as ``y``
    """
    z = np.array(y, dtype=float)
    n_points = z.size
    for k in range(int(iterations), 0, -1):
        if 2 * k >= n_points:
            continue
        average = 0.5 * (z[: -2 * k] + z[2 * k :])
        z[k:-k] = np.minimum(z[k:-k], average)
    return z


__all__ = ["snip_baseline"]
