"""Fit result records, parameter estimates and statistics."""

from specfit.core.results.decay_results import (
    DecayComponent,
    ExpDecayFit,
    GlobalFitResult,
)
from specfit.core.results.estimates import ParameterEstimate
from specfit.core.results.peak_results import MultiPeakFitResult, PeakFitResult, TASpectrumFit

__all__ = [
    "DecayComponent",
    "ExpDecayFit",
    "GlobalFitResult",
    "MultiPeakFitResult",
    "ParameterEstimate",
    "PeakFitResult",
    "TASpectrumFit",
]
