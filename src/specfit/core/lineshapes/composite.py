"""Composite models built from the lineshape functions.

- :class:`CompositePeakModel`: a sum of peaks plus a polynomial baseline
- :class:`MultiExponentialModel`: a sum of exponential decays sharing t0 and IRF
- :class:`GlobalDecayModel`: several traces sharing the kinetic parameters
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.polynomial import polynomial

from specfit.core.lineshapes.functions import exp_decay, irf_exp_decay

if TYPE_CHECKING:
    from specfit.core.lineshapes.registry import PeakModel
    from specfit.core.shared.typing import ArrayLike, FloatArray


@dataclass(frozen=True)
class CompositePeakModel:
    """``n_peaks`` copies of a peak model plus a polynomial baseline.

    Parameter vector layout::

        [peak_1 params, ..., peak_n params, c0, c1, ..., c_order]

    The polynomial is evaluated in ``(x - x_ref)`` to keep the baseline
    coefficients well conditioned far from the origin.
    """

    peak_model: PeakModel
    n_peaks: int
    baseline_order: int
    x_ref: float = 0.0

    @property
    def n_peak_params(self) -> int:
        return self.peak_model.n_params

    @property
    def n_params(self) -> int:
        return self.n_peaks * self.n_peak_params + self.baseline_order + 1

    def param_names(self) -> list[str]:
        """Flat parameter names, e.g. ``center_2`` or ``c1``."""
        names = [
            f"{name}_{i + 1}"
            for i in range(self.n_peaks)
            for name in self.peak_model.param_names
        ]
        names += [f"c{j}" for j in range(self.baseline_order + 1)]
        return names

    def peak_slice(self, index: int) -> slice:
        start = index * self.n_peak_params
        return slice(start, start + self.n_peak_params)

    @property
    def baseline_slice(self) -> slice:
        return slice(self.n_peaks * self.n_peak_params, self.n_params)

    def peak(self, index: int, params: ArrayLike, x: ArrayLike) -> FloatArray:
        """Lineshape ``index`` alone, without baseline."""
        params = np.asarray(params)
        return self.peak_model.evaluate(params[self.peak_slice(index)], x)

    def baseline(self, params: ArrayLike, x: ArrayLike) -> FloatArray:
        """Polynomial baseline alone."""
        coefficients = np.asarray(params)[self.baseline_slice]
        return polynomial.polyval(np.asarray(x) - self.x_ref, coefficients)

    def __call__(self, params: ArrayLike, x: ArrayLike) -> FloatArray:
        total = self.baseline(params, x)
        for index in range(self.n_peaks):
            total = total + self.peak(index, params, x)
        return total


@dataclass(frozen=True)
class MultiExponentialModel:
    """Sum of ``n_exp`` exponential decays with shared t0, IRF width and offset.

    Parameter vector layout::

        [A_1, tau_1, ..., A_n, tau_n, t0, (sigma), offset]

    ``sigma`` is present only when ``irf`` is True. Without IRF every
    component is the step exponential, exactly ``offset`` before ``t0``.
    """

    n_exp: int
    irf: bool

    @property
    def n_params(self) -> int:
        return 2 * self.n_exp + (3 if self.irf else 2)

    def param_names(self) -> list[str]:
        names = [f"{key}_{i + 1}" for i in range(self.n_exp) for key in ("amplitude", "tau")]
        names.append("t0")
        if self.irf:
            names.append("sigma")
        names.append("offset")
        return names

    @property
    def t0_index(self) -> int:
        return 2 * self.n_exp

    @property
    def sigma_index(self) -> int | None:
        return 2 * self.n_exp + 1 if self.irf else None

    def component(self, index: int, params: ArrayLike, t: ArrayLike) -> FloatArray:
        """Component ``index`` alone, without offset."""
        params = np.asarray(params)
        amplitude, tau = params[2 * index], params[2 * index + 1]
        t0 = params[self.t0_index]
        if self.irf:
            return irf_exp_decay((amplitude, tau, t0, params[self.sigma_index], 0.0), t)
        return exp_decay((amplitude, tau, t0, 0.0), t)

    def __call__(self, params: ArrayLike, t: ArrayLike) -> FloatArray:
        params = np.asarray(params)
        total = np.zeros(np.shape(t)) + params[-1]
        for index in range(self.n_exp):
            total = total + self.component(index, params, t)
        return total


@dataclass(frozen=True)
class GlobalDecayModel:
    """Several kinetic traces sharing taus, t0 and IRF width.

    Parameter vector layout::

        [tau_1, ..., tau_n, t0, (sigma),
         A_11, ..., A_1n, offset_1, ..., A_m1, ..., A_mn, offset_m]

    The independent variable is the concatenation of every trace's time
    axis; ``sizes`` holds the length of each trace so each segment is
    evaluated with its own amplitudes and offset.
    """

    n_exp: int
    irf: bool
    sizes: tuple[int, ...]

    @property
    def n_traces(self) -> int:
        return len(self.sizes)

    @property
    def n_shared(self) -> int:
        return self.n_exp + (2 if self.irf else 1)

    @property
    def n_params(self) -> int:
        return self.n_shared + self.n_traces * (self.n_exp + 1)

    @property
    def trace_model(self) -> MultiExponentialModel:
        return MultiExponentialModel(self.n_exp, self.irf)

    def param_names(self) -> list[str]:
        names = [f"tau_{i + 1}" for i in range(self.n_exp)]
        names.append("t0")
        if self.irf:
            names.append("sigma")
        for j in range(self.n_traces):
            names += [f"trace{j + 1}_amplitude_{i + 1}" for i in range(self.n_exp)]
            names.append(f"trace{j + 1}_offset")
        return names

    def trace_slice(self, trace: int) -> slice:
        """Per-trace block ``[A_1, ..., A_n, offset]`` of trace ``trace``."""
        start = self.n_shared + trace * (self.n_exp + 1)
        return slice(start, start + self.n_exp + 1)

    def trace_params(self, params: ArrayLike, trace: int) -> FloatArray:
        """Single-trace vector in :class:`MultiExponentialModel` layout."""
        params = np.asarray(params)
        block = params[self.trace_slice(trace)]
        vector = np.empty(self.trace_model.n_params, dtype=params.dtype)
        vector[0 : 2 * self.n_exp : 2] = block[: self.n_exp]
        vector[1 : 2 * self.n_exp : 2] = params[: self.n_exp]
        vector[2 * self.n_exp :] = params[self.n_exp : self.n_shared].tolist() + [block[-1]]
        return vector

    def split(self, values: ArrayLike) -> list[FloatArray]:
        """Split a concatenated array into per-trace segments."""
        return np.split(np.asarray(values), np.cumsum(self.sizes)[:-1])

    def __call__(self, params: ArrayLike, t: ArrayLike) -> FloatArray:
        model = self.trace_model
        segments = [
            model(self.trace_params(params, j), t_j) for j, t_j in enumerate(self.split(t))
        ]
        return np.concatenate(segments)


__all__ = ["CompositePeakModel", "GlobalDecayModel", "MultiExponentialModel"]
