"""Configuration models for specfit.

Configurations are plain pydantic models. They never reach into the fitting
core by themselves: each offers ``to_kwargs()`` so the CLI (or a script)
passes their values to the fitting functions as explicit arguments.
"""

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from specfit.core.constants import (
    ALS_LAMBDA,
    ALS_P,
    ARPLS_MAX_ITER,
    ARPLS_RATIO,
    DEFAULT_BASELINE_ORDER,
    DEFAULT_CONFIDENCE,
    LEAST_SQUARES_FTOL,
    LEAST_SQUARES_GTOL,
    LEAST_SQUARES_MAX_NFEV,
    LEAST_SQUARES_XTOL,
    SNIP_ITERATIONS,
)

PeakModelName = Literal["lorentzian", "gaussian", "pseudo_voigt"]
BaselineMethod = Literal["als", "arpls", "snip"]
LogFormat = Literal["text", "json"]

Confidence = Annotated[float, Field(gt=0.0, lt=1.0)]


class SolverConfig(BaseModel):
    """Stopping criteria for the nonlinear least-squares solver."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_nfev: Annotated[int, Field(gt=0)] = Field(
        default=LEAST_SQUARES_MAX_NFEV,
        description="Maximum number of function evaluations.",
    )
    ftol: Annotated[float, Field(gt=0)] = Field(
        default=LEAST_SQUARES_FTOL, description="Relative cost change tolerance."
    )
    xtol: Annotated[float, Field(gt=0)] = Field(
        default=LEAST_SQUARES_XTOL, description="Relative parameter change tolerance."
    )
    gtol: Annotated[float, Field(gt=0)] = Field(
        default=LEAST_SQUARES_GTOL, description="Gradient norm tolerance."
    )


class BaselineConfig(BaseModel):
    """Baseline correction options.

    Only the options relevant to ``method`` are forwarded.
    """

    model_config = ConfigDict(extra="forbid")

    method: BaselineMethod = Field(default="arpls", description="Baseline algorithm.")
    lam: Annotated[float, Field(gt=0)] = Field(
        default=ALS_LAMBDA, description="Smoothness for ALS/arPLS."
    )
    p: Annotated[float, Field(gt=0, lt=1)] = Field(default=ALS_P, description="ALS asymmetry.")
    max_iter: Annotated[int, Field(gt=0)] | None = Field(
        default=None, description="Re-weighting iterations (algorithm default if unset)."
    )
    ratio: Annotated[float, Field(gt=0)] = Field(
        default=ARPLS_RATIO, description="arPLS stopping ratio."
    )
    iterations: Annotated[int, Field(gt=0)] = Field(
        default=SNIP_ITERATIONS, description="SNIP clipping half-window."
    )

    def to_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :func:`specfit.core.baseline.correct_baseline`."""
        if self.method == "snip":
            return {"method": "snip", "iterations": self.iterations}
        if self.method == "als":
            kwargs: dict[str, Any] = {"method": "als", "lam": self.lam, "p": self.p}
        else:
            kwargs = {"method": "arpls", "lam": self.lam, "ratio": self.ratio}
            kwargs["max_iter"] = ARPLS_MAX_ITER
        if self.max_iter is not None:
            kwargs["max_iter"] = self.max_iter
        return kwargs


class PeakFitConfig(BaseModel):
    """Options for multi-peak decomposition."""

    model_config = ConfigDict(extra="forbid")

    model: PeakModelName = Field(default="lorentzian", description="Peak lineshape.")
    n_peaks: Annotated[int, Field(gt=0)] | None = Field(
        default=None, description="Number of peaks (1 when unset)."
    )
    baseline_order: Annotated[int, Field(ge=0, le=10)] = Field(
        default=DEFAULT_BASELINE_ORDER, description="Polynomial baseline order."
    )
    region: tuple[float, float] | None = Field(
        default=None, description="Open interval (lo, hi) of x to fit."
    )
    confidence: Confidence = Field(default=DEFAULT_CONFIDENCE)

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: tuple[float, float] | None) -> tuple[float, float] | None:
        """Ensure the region bounds are increasing."""
        if v is not None and v[0] >= v[1]:
            msg = f"region lower bound must be below the upper bound, got {v}"
            raise ValueError(msg)
        return v

    def to_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :func:`specfit.core.fitting.peaks.fit_peaks`."""
        return self.model_dump()


class DecayFitConfig(BaseModel):
    """Options for exponential-decay and global fits."""

    model_config = ConfigDict(extra="forbid")

    n_exp: Annotated[int, Field(gt=0, le=6)] = Field(default=1)
    irf: bool = Field(default=True, description="Convolve with a Gaussian IRF.")
    irf_width: Annotated[float, Field(gt=0)] | None = Field(
        default=None, description="Initial IRF sigma."
    )
    t_start: float | None = Field(
        default=None, description="Fixed time zero for fits without IRF."
    )
    confidence: Confidence = Field(default=DEFAULT_CONFIDENCE)

    def to_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the decay and global fitters."""
        return self.model_dump()


class LoggingConfig(BaseModel):
    """Log file options."""

    model_config = ConfigDict(extra="forbid")

    file: Path | None = Field(default=None, description="Log file path.")
    format: LogFormat | None = Field(
        default=None, description="Log file format; inferred from a .json suffix when unset."
    )


class SpecFitConfig(BaseModel):
    """Top-level specfit configuration.

    Example TOML configuration:
        [solver]
        max_nfev = 5000

        [baseline]
        method = "arpls"
        lam = 1e5

        [peaks]
        model = "lorentzian"
        n_peaks = 2
        region = [1950.0, 2150.0]

        [decay]
        n_exp = 2
        irf = true
    """

    model_config = ConfigDict(extra="forbid")

    solver: SolverConfig = Field(default_factory=SolverConfig)
    baseline: BaselineConfig = Field(default_factory=BaselineConfig)
    peaks: PeakFitConfig = Field(default_factory=PeakFitConfig)
    decay: DecayFitConfig = Field(default_factory=DecayFitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


__all__ = [
    "BaselineConfig",
    "DecayFitConfig",
    "LoggingConfig",
    "PeakFitConfig",
    "SolverConfig",
    "SpecFitConfig",
]
