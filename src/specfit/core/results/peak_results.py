"""Result records for multi-peak decomposition fits.

A :class:`MultiPeakFitResult` is immutable and self-contained: it keeps the
fitted slice, the composite model and the optimizer outcome, so every
accessor (``predict``, ``predict_peak``, ``residuals``, per-peak estimates)
reproduces exactly what was fitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any

import numpy as np

from specfit.core.domain.signals import Signal, signal_axis
from specfit.core.lineshapes.functions import SIGMA_TO_FWHM
from specfit.core.results.estimates import ParameterEstimate
from specfit.core.results.statistics import (
    compute_r_squared,
    compute_total_sum_of_squares,
)
from specfit.core.shared.exceptions import UsageError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from specfit.core.fitting.optimizer import OptimizationResult
    from specfit.core.lineshapes.composite import CompositePeakModel
    from specfit.core.shared.typing import ArrayLike, FloatArray


def resolve_axis(x: Signal | ArrayLike | None, default: FloatArray) -> FloatArray:
    """Abscissa from ``None`` (use ``default``), a 1-D signal container or an array."""
    if x is None:
        return default
    if isinstance(x, Signal):
        return np.asarray(signal_axis(x), dtype=float)
    return np.asarray(x, dtype=float)


def _area_estimate(
    composite: CompositePeakModel,
    fit: OptimizationResult,
    index: int,
    t_value: float,
) -> ParameterEstimate:
    """Analytic peak area with first-order error propagation."""
    block = composite.peak_slice(index)
    values = fit.params[block]
    area_fn = composite.peak_model.area
    area = float(area_fn(values))

    # Central differences; the areas are at most bilinear in the parameters
    gradient = np.zeros(values.size)
    for k in range(values.size):
        step = 1e-6 * max(1.0, abs(values[k]))
        plus, minus = values.copy(), values.copy()
        plus[k] += step
        minus[k] -= step
        gradient[k] = (area_fn(plus) - area_fn(minus)) / (2.0 * step)

    cov = fit.covariance[block, block]
    variance = float(gradient @ cov @ gradient)
    err = float(np.sqrt(variance)) if np.isfinite(variance) and variance >= 0 else np.nan
    half = t_value * err if err > 0 else (0.0 if err == 0 else np.nan)
    return ParameterEstimate("area", area, err, (area - half, area + half))


@dataclass(frozen=True)
class PeakFitResult:
    """One fitted peak.

    Estimates are reachable by key (``peak["center"]``) or attribute
    (``peak.center``); each is a :class:`ParameterEstimate` with ``value``,
    ``err`` and ``ci``.
    """

    index: int
    model: str
    params: dict[str, ParameterEstimate]
    area: ParameterEstimate

    def __getitem__(self, key: str) -> ParameterEstimate:
        if key == "area":
            return self.area
        try:
            return self.params[key]
        except KeyError:
            msg = f"Peak has no parameter '{key}'. Available: {', '.join(self.keys())}"
            raise KeyError(msg) from None

    def __getattr__(self, name: str) -> ParameterEstimate:
        if name.startswith("_") or name == "params":
            raise AttributeError(name)
        try:
            return self.params[name]
        except KeyError:
            raise AttributeError(name) from None

    def __contains__(self, key: str) -> bool:
        return key == "area" or key in self.params

    def keys(self) -> list[str]:
        return [*self.params, "area"]

    @property
    def fwhm_value(self) -> float:
        """FWHM in x units, derived from sigma for pseudo-Voigt peaks."""
        if "fwhm" in self.params:
            return self.params["fwhm"].value
        return SIGMA_TO_FWHM * self.params["sigma"].value

    @property
    def title(self) -> str:
        return "Peak Fit"

    def summary_rows(self) -> list[tuple[str, ParameterEstimate]]:
        return [(f"Peak {self.index + 1} {key}", self[key]) for key in self.keys()]

    def summary_info(self) -> dict[str, str]:
        return {"Model": self.model}

    def to_dict(self) -> dict[str, Any]:
        return {key: self[key].to_dict() for key in self.keys()}


@dataclass(frozen=True)
class MultiPeakFitResult:
    """Outcome of :func:`specfit.core.fitting.peaks.fit_peaks`.

    Attributes
    ----------
        composite: Composite model (peaks + baseline) that was fitted
        fit: Optimizer outcome with peaks sorted by ascending center
        x: Abscissa of the fitted slice
        y: Data of the fitted slice
        region: Requested ``(lo, hi)`` region, or None for the full signal
        confidence: Confidence level used for the reported intervals
        sample_id: Identifier carried over from the input signal
    """

    composite: CompositePeakModel
    fit: OptimizationResult
    x: FloatArray
    y: FloatArray
    region: tuple[float, float] | None = None
    confidence: float = 0.95
    sample_id: str = ""
    peaks: tuple[PeakFitResult, ...] = field(init=False)

    def __post_init__(self) -> None:
        t_value = self.fit.t_value(self.confidence)
        peaks = []
        for index in range(self.composite.n_peaks):
            block = self.composite.peak_slice(index)
            params = {
                name: self.fit.estimate(i, self.confidence, label=name)
                for name, i in zip(
                    self.composite.peak_model.param_names,
                    range(block.start, block.stop),
                    strict=True,
                )
            }
            area = _area_estimate(self.composite, self.fit, index, t_value)
            peaks.append(PeakFitResult(index, self.composite.peak_model.name, params, area))
        object.__setattr__(self, "peaks", tuple(peaks))

    # -- peak access ---------------------------------------------------------

    def __getitem__(self, index: int) -> PeakFitResult:
        return self.peaks[index]

    def __len__(self) -> int:
        return len(self.peaks)

    def __iter__(self) -> Iterator[PeakFitResult]:
        return iter(self.peaks)

    @property
    def n_peaks(self) -> int:
        return self.composite.n_peaks

    @property
    def model(self) -> str:
        return self.composite.peak_model.name

    @property
    def baseline_order(self) -> int:
        return self.composite.baseline_order

    @property
    def x_ref(self) -> float:
        return self.composite.x_ref

    @property
    def baseline_coefficients(self) -> FloatArray:
        """Polynomial coefficients in ``(x - x_ref)``, constant term first."""
        return self.fit.params[self.composite.baseline_slice].copy()

    def baseline_estimates(self) -> list[ParameterEstimate]:
        block = self.composite.baseline_slice
        return [
            self.fit.estimate(i, self.confidence) for i in range(block.start, block.stop)
        ]

    # -- predictions ---------------------------------------------------------

    def predict(self, x: Any = None) -> FloatArray:
        """Full composite model (peaks + baseline)."""
        return self.composite(self.fit.params, resolve_axis(x, self.x))

    def predict_peak(self, index: int, x: Any = None) -> FloatArray:
        """Lineshape ``index`` alone (0-based, sorted by center), without baseline."""
        if not -self.n_peaks <= index < self.n_peaks:
            msg = f"Peak index {index} out of range for {self.n_peaks} peaks"
            raise UsageError(msg)
        return self.composite.peak(index % self.n_peaks, self.fit.params, resolve_axis(x, self.x))

    def predict_baseline(self, x: Any = None) -> FloatArray:
        """Polynomial baseline alone."""
        return self.composite.baseline(self.fit.params, resolve_axis(x, self.x))

    def residuals(self) -> FloatArray:
        """``y - predict()`` over the fitted slice."""
        return self.y - self.predict()

    # -- statistics ----------------------------------------------------------

    @property
    def rss(self) -> float:
        return self.fit.rss

    @property
    def npoints(self) -> int:
        return int(self.x.size)

    @property
    def converged(self) -> bool:
        return self.fit.converged

    @cached_property
    def r_squared(self) -> float:
        """R² against the total variance of the fitted slice."""
        return compute_r_squared(self.rss, compute_total_sum_of_squares(self.y))

    # -- reporting -----------------------------------------------------------

    @property
    def title(self) -> str:
        return "Peak Fit"

    def summary_rows(self) -> list[tuple[str, ParameterEstimate]]:
        """Rows ``(label, estimate)`` for tables and Markdown reports."""
        rows: list[tuple[str, ParameterEstimate]] = []
        for peak in self.peaks:
            rows += [(f"Peak {peak.index + 1} {key}", peak[key]) for key in peak.keys()]
        rows += [(f"Baseline {est.name}", est) for est in self.baseline_estimates()]
        return rows

    def summary_info(self) -> dict[str, str]:
        info = {
            "Model": self.model,
            "Peaks": str(self.n_peaks),
            "Baseline order": str(self.baseline_order),
            "Points": str(self.npoints),
            "R²": f"{self.r_squared:.6f}",
            "RSS": f"{self.rss:.6g}",
            "Converged": "yes" if self.converged else "no",
        }
        if self.region is not None:
            info["Region"] = f"{self.region[0]:g} – {self.region[1]:g}"
        if self.sample_id:
            info["Sample"] = self.sample_id
        return info


@dataclass(frozen=True)
class TASpectrumFit:
    """Transient absorption spectrum fit with one ESA and one GSB band.

    ``anharmonicity`` is ``gsb.center - esa.center``: the excited-state
    absorption is red-shifted from the bleach by the vibrational
    anharmonicity.
    """

    result: MultiPeakFitResult
    esa_index: int
    gsb_index: int

    @property
    def esa(self) -> PeakFitResult:
        return self.result[self.esa_index]

    @property
    def gsb(self) -> PeakFitResult:
        return self.result[self.gsb_index]

    @cached_property
    def anharmonicity(self) -> ParameterEstimate:
        """Center difference with errors combined from the full covariance."""
        composite = self.result.composite
        i_esa = composite.peak_slice(self.esa_index).start + 1
        i_gsb = composite.peak_slice(self.gsb_index).start + 1
        fit = self.result.fit
        value = float(fit.params[i_gsb] - fit.params[i_esa])
        cov = fit.covariance
        variance = cov[i_gsb, i_gsb] + cov[i_esa, i_esa] - 2.0 * cov[i_gsb, i_esa]
        err = float(np.sqrt(variance)) if np.isfinite(variance) and variance >= 0 else np.nan
        half = fit.t_value(self.result.confidence) * err
        return ParameterEstimate("anharmonicity", value, err, (value - half, value + half))

    def predict(self, x: Any = None) -> FloatArray:
        return self.result.predict(x)

    def residuals(self) -> FloatArray:
        return self.result.residuals()

    @property
    def r_squared(self) -> float:
        return self.result.r_squared

    @property
    def rss(self) -> float:
        return self.result.rss

    @property
    def converged(self) -> bool:
        return self.result.converged

    @property
    def title(self) -> str:
        return "TA Spectrum Fit"

    def summary_rows(self) -> list[tuple[str, ParameterEstimate]]:
        rows: list[tuple[str, ParameterEstimate]] = []
        for label, peak in (("ESA", self.esa), ("GSB", self.gsb)):
            rows += [(f"{label} {key}", peak[key]) for key in peak.keys()]
        rows.append(("Anharmonicity", self.anharmonicity))
        return rows

    def summary_info(self) -> dict[str, str]:
        return self.result.summary_info()


__all__ = ["MultiPeakFitResult", "PeakFitResult", "TASpectrumFit", "resolve_axis"]
