"""Lineshape models package.

Pure model functions for spectral peaks and kinetic decays, plus a registry
mapping peak model names to their single-peak evaluators.
"""

from specfit.core.lineshapes.composite import (
    CompositePeakModel,
    GlobalDecayModel,
    MultiExponentialModel,
)
from specfit.core.lineshapes.functions import (
    SIGMA_TO_FWHM,
    exp_decay,
    gaussian,
    gaussian_area,
    irf_exp_decay,
    lorentzian,
    lorentzian_area,
    pseudo_voigt,
    pseudo_voigt_area,
)
from specfit.core.lineshapes.registry import (
    PeakModel,
    get_peak_model,
    list_peak_models,
    peak_area,
    register_peak_model,
)

__all__ = [
    "SIGMA_TO_FWHM",
    "CompositePeakModel",
    "GlobalDecayModel",
    "MultiExponentialModel",
    "PeakModel",
    "exp_decay",
    "gaussian",
    "gaussian_area",
    "get_peak_model",
    "irf_exp_decay",
    "list_peak_models",
    "lorentzian",
    "lorentzian_area",
    "pseudo_voigt",
    "peak_area",
    "pseudo_voigt_area",
    "register_peak_model",
]
