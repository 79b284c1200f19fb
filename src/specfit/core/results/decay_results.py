"""Result records for exponential-decay and global kinetic fits."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

import numpy as np

from specfit.core.results.peak_results import resolve_axis
from specfit.core.results.statistics import (
    compute_r_squared,
    compute_rss,
    compute_total_sum_of_squares,
)
from specfit.core.shared.exceptions import UsageError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from specfit.core.fitting.optimizer import OptimizationResult
    from specfit.core.lineshapes.composite import GlobalDecayModel, MultiExponentialModel
    from specfit.core.results.estimates import ParameterEstimate
    from specfit.core.shared.typing import FloatArray


def _weights(amplitudes: FloatArray) -> FloatArray:
    magnitude = np.abs(amplitudes)
    total = magnitude.sum()
    if total == 0.0:
        return np.full(amplitudes.size, 1.0 / amplitudes.size)
    return magnitude / total


def _signal_type(amplitudes: FloatArray) -> str:
    dominant = amplitudes[np.argmax(np.abs(amplitudes))]
    return "esa" if dominant > 0 else "gsb"


@dataclass(frozen=True, slots=True)
class DecayComponent:
    """One exponential component: its time constant, amplitude and weight."""

    index: int
    tau: ParameterEstimate
    amplitude: ParameterEstimate
    weight: float


@dataclass(frozen=True)
class ExpDecayFit:
    """Outcome of :func:`specfit.core.fitting.decay.fit_exp_decay`.

    Components are sorted fastest first (ascending tau).

    Attributes
    ----------
        model: Multi-exponential model that was fitted
        fit: Optimizer outcome
        time: Time axis of the fitted trace
        signal: Fitted signal
        confidence: Confidence level used for the reported intervals
        sample_id: Identifier carried over from the input trace
    """

    model: MultiExponentialModel
    fit: OptimizationResult
    time: FloatArray
    signal: FloatArray
    confidence: float = 0.95
    sample_id: str = ""

    @property
    def n_exp(self) -> int:
        return self.model.n_exp

    @property
    def irf(self) -> bool:
        return self.model.irf

    @property
    def taus(self) -> FloatArray:
        return self.fit.params[1 : 2 * self.n_exp : 2].copy()

    @property
    def amplitudes(self) -> FloatArray:
        return self.fit.params[0 : 2 * self.n_exp : 2].copy()

    @property
    def tau(self) -> float:
        """Fastest time constant."""
        return float(self.taus[0])

    @property
    def amplitude(self) -> float:
        """Amplitude of the fastest component."""
        return float(self.amplitudes[0])

    @property
    def t0(self) -> float:
        return float(self.fit.params[self.model.t0_index])

    @property
    def sigma(self) -> float:
        """IRF width; NaN for fits without IRF."""
        if self.model.sigma_index is None:
            return np.nan
        return float(self.fit.params[self.model.sigma_index])

    @property
    def offset(self) -> float:
        return float(self.fit.params[-1])

    @property
    def weights(self) -> FloatArray:
        """``|A_i| / sum |A_j|``; sums to one."""
        return _weights(self.amplitudes)

    @property
    def signal_type(self) -> str:
        """Sign of the dominant amplitude: "esa" if positive, else "gsb"."""
        return _signal_type(self.amplitudes)

    @cached_property
    def params(self) -> dict[str, ParameterEstimate]:
        """Named estimates (``tau_1``, ``amplitude_1``, ..., ``t0``, ``sigma``, ``offset``)."""
        return self.fit.estimates(self.confidence)

    @property
    def components(self) -> list[DecayComponent]:
        weights = self.weights
        return [
            DecayComponent(
                index=i,
                tau=self.params[f"tau_{i + 1}"],
                amplitude=self.params[f"amplitude_{i + 1}"],
                weight=float(weights[i]),
            )
            for i in range(self.n_exp)
        ]

    def __getitem__(self, key: str) -> ParameterEstimate:
        return self.params[key]

    def predict(self, x: Any = None) -> FloatArray:
        """Model at ``x`` (time array or trace), the fitted time axis by default."""
        return self.model(self.fit.params, resolve_axis(x, self.time))

    def predict_component(self, index: int, x: Any = None) -> FloatArray:
        """Component ``index`` alone, without offset."""
        return self.model.component(index, self.fit.params, resolve_axis(x, self.time))

    def residuals(self) -> FloatArray:
        return self.signal - self.predict()

    @property
    def rss(self) -> float:
        return self.fit.rss

    @property
    def npoints(self) -> int:
        return int(self.time.size)

    @property
    def converged(self) -> bool:
        return self.fit.converged

    @cached_property
    def r_squared(self) -> float:
        return compute_r_squared(self.rss, compute_total_sum_of_squares(self.signal))

    @property
    def title(self) -> str:
        return "Exponential Decay" if self.n_exp == 1 else "Multi-exponential Decay"

    def summary_rows(self) -> list[tuple[str, ParameterEstimate]]:
        rows: list[tuple[str, ParameterEstimate]] = []
        for component in self.components:
            suffix = f" {component.index + 1}" if self.n_exp > 1 else ""
            rows.append((f"τ{suffix}", component.tau))
            rows.append((f"A{suffix}", component.amplitude))
        rows.append(("t0", self.params["t0"]))
        if self.irf:
            rows.append(("σ (IRF)", self.params["sigma"]))
        rows.append(("offset", self.params["offset"]))
        return rows

    def summary_info(self) -> dict[str, str]:
        info = {
            "Components": str(self.n_exp),
            "IRF": "yes" if self.irf else "no",
            "Signal": self.signal_type.upper(),
            "Points": str(self.npoints),
            "R²": f"{self.r_squared:.6f}",
            "RSS": f"{self.rss:.6g}",
            "Converged": "yes" if self.converged else "no",
        }
        if self.n_exp > 1:
            info["Weights"] = ", ".join(f"{w:.3f}" for w in self.weights)
        if self.sample_id:
            info["Sample"] = self.sample_id
        return info


@dataclass(frozen=True)
class GlobalFitResult:
    """Outcome of :func:`specfit.core.fitting.global_fit.fit_global`.

    ``amplitudes[j, i]`` is the amplitude of component ``i`` in trace ``j``;
    column ``i`` across traces is the decay-associated spectrum of
    component ``i``.
    """

    model: GlobalDecayModel
    fit: OptimizationResult
    times: tuple[FloatArray, ...]
    signals: tuple[FloatArray, ...]
    labels: tuple[str, ...]
    confidence: float = 0.95

    @property
    def n_exp(self) -> int:
        return self.model.n_exp

    @property
    def n_traces(self) -> int:
        return self.model.n_traces

    @property
    def irf(self) -> bool:
        return self.model.irf

    @property
    def taus(self) -> FloatArray:
        return self.fit.params[: self.n_exp].copy()

    @property
    def t0(self) -> float:
        return float(self.fit.params[self.n_exp])

    @property
    def sigma(self) -> float:
        return float(self.fit.params[self.n_exp + 1]) if self.irf else np.nan

    @property
    def amplitudes(self) -> FloatArray:
        """Amplitude matrix of shape ``(n_traces, n_exp)``."""
        return np.array(
            [self.fit.params[self.model.trace_slice(j)][: self.n_exp] for j in range(self.n_traces)]
        )

    @property
    def offsets(self) -> FloatArray:
        return np.array(
            [self.fit.params[self.model.trace_slice(j)][-1] for j in range(self.n_traces)]
        )

    @cached_property
    def params(self) -> dict[str, ParameterEstimate]:
        return self.fit.estimates(self.confidence)

    def __getitem__(self, key: str) -> ParameterEstimate:
        return self.params[key]

    def _axes(self, traces: Sequence[Any] | None) -> list[FloatArray]:
        if traces is None:
            return list(self.times)
        if len(traces) != self.n_traces:
            msg = f"Expected {self.n_traces} traces, got {len(traces)}"
            raise UsageError(msg)
        return [resolve_axis(trace, default) for trace, default in zip(traces, self.times)]

    def predict(self, traces: Sequence[Any] | None = None) -> list[FloatArray]:
        """One predicted curve per trace, each on that trace's own time axis."""
        model = self.model.trace_model
        return [
            model(self.model.trace_params(self.fit.params, j), t)
            for j, t in enumerate(self._axes(traces))
        ]

    def residuals(self, traces: Sequence[Any] | None = None) -> list[FloatArray]:
        if traces is None:
            signals = list(self.signals)
        else:
            signals = [np.asarray(trace.ydata(), dtype=float) for trace in traces]
        return [s - p for s, p in zip(signals, self.predict(traces), strict=True)]

    @property
    def rss(self) -> float:
        return self.fit.rss

    @cached_property
    def trace_r_squared(self) -> FloatArray:
        return np.array(
            [
                compute_r_squared(compute_rss(r), compute_total_sum_of_squares(s))
                for r, s in zip(self.residuals(), self.signals, strict=True)
            ]
        )

    @cached_property
    def _total(self) -> float:
        return sum(compute_total_sum_of_squares(s) for s in self.signals)

    @property
    def r_squared(self) -> float:
        """``1 - RSS / sum of per-trace total sums of squares``."""
        return compute_r_squared(self.rss, self._total)

    @property
    def converged(self) -> bool:
        return self.fit.converged

    @property
    def title(self) -> str:
        return "Global Fit"

    def shared_rows(self) -> list[tuple[str, ParameterEstimate]]:
        rows = [
            (f"τ {i + 1}" if self.n_exp > 1 else "τ", self.params[f"tau_{i + 1}"])
            for i in range(self.n_exp)
        ]
        rows.append(("t0", self.params["t0"]))
        if self.irf:
            rows.append(("σ (IRF)", self.params["sigma"]))
        return rows

    def trace_rows(self, trace: int) -> list[tuple[str, ParameterEstimate]]:
        prefix = f"trace{trace + 1}_"
        rows = [
            (f"A {i + 1}" if self.n_exp > 1 else "A", self.params[f"{prefix}amplitude_{i + 1}"])
            for i in range(self.n_exp)
        ]
        rows.append(("offset", self.params[f"{prefix}offset"]))
        return rows

    def summary_rows(self) -> list[tuple[str, ParameterEstimate]]:
        rows = self.shared_rows()
        for j, label in enumerate(self.labels):
            rows += [(f"{label} {name}", est) for name, est in self.trace_rows(j)]
        return rows

    def summary_info(self) -> dict[str, str]:
        return {
            "Traces": str(self.n_traces),
            "Components": str(self.n_exp),
            "IRF": "yes" if self.irf else "no",
            "R²": f"{self.r_squared:.6f}",
            "RSS": f"{self.rss:.6g}",
            "Converged": "yes" if self.converged else "no",
        }


__all__ = ["DecayComponent", "ExpDecayFit", "GlobalFitResult"]
