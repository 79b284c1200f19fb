"""Domain models: signal containers, peak candidates and configuration."""

from specfit.core.domain.config import (
    BaselineConfig,
    DecayFitConfig,
    LoggingConfig,
    PeakFitConfig,
    SolverConfig,
    SpecFitConfig,
)
from specfit.core.domain.peaks import PeakCandidate, PeakDetector, find_peaks
from specfit.core.domain.signals import (
    KineticTrace,
    Signal,
    SignalKind,
    SignalMatrix,
    Spectrum,
)

__all__ = [
    "BaselineConfig",
    "DecayFitConfig",
    "KineticTrace",
    "LoggingConfig",
    "PeakCandidate",
    "PeakDetector",
    "PeakFitConfig",
    "Signal",
    "SignalKind",
    "SignalMatrix",
    "SolverConfig",
    "Spectrum",
    "find_peaks",
]
