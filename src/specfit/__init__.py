"""specfit - Curve fitting for spectroscopy data.

Public API:
    - fit_peaks, fit_ta_spectrum: Multi-peak decomposition of spectra
    - fit_exp_decay: Multi-exponential decays with optional IRF
    - fit_global: Shared-kinetics fits of several traces
    - correct_baseline: ALS, arPLS and SNIP baseline estimation

Domain Objects:
    - Spectrum, KineticTrace, SignalMatrix: Immutable signal containers

Reporting:
    - format_results: Markdown summary of any fit result
"""

import contextlib
from importlib import metadata

__version__ = "0.1.0"

with contextlib.suppress(metadata.PackageNotFoundError):
    __version__ = metadata.version(__name__)

from specfit.core.baseline import correct_baseline, correct_signal_baseline
from specfit.core.domain.config import SpecFitConfig
from specfit.core.domain.peaks import find_peaks
from specfit.core.domain.signals import KineticTrace, SignalMatrix, Spectrum
from specfit.core.fitting import (
    fit_exp_decay,
    fit_global,
    fit_peaks,
    fit_ta_spectrum,
    predict,
    predict_baseline,
    predict_peak,
    residuals,
)
from specfit.core.shared.exceptions import (
    ConvergenceWarning,
    InputDataError,
    SpecFitError,
    UsageError,
)
from specfit.io.markdown import format_results

__all__ = [
    # Version
    "__version__",
    # Fitting
    "fit_exp_decay",
    "fit_global",
    "fit_peaks",
    "fit_ta_spectrum",
    "correct_baseline",
    "correct_signal_baseline",
    "find_peaks",
    # Accessors
    "predict",
    "predict_baseline",
    "predict_peak",
    "residuals",
    # Domain
    "KineticTrace",
    "SignalMatrix",
    "Spectrum",
    "SpecFitConfig",
    # Errors
    "ConvergenceWarning",
    "InputDataError",
    "SpecFitError",
    "UsageError",
    # Reporting
    "format_results",
]
