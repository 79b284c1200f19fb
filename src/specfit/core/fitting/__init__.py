"""Fitting engine.

Parameter management, the nonlinear least-squares driver and the fitters
built on it: multi-peak decomposition, exponential decays and global
kinetics.
"""

# Module-level accessors
from specfit.core.fitting.accessors import predict, predict_baseline, predict_peak, residuals

# Exponential decays
from specfit.core.fitting.decay import fit_exp_decay, initial_decay_guess

# Global kinetics
from specfit.core.fitting.global_fit import fit_global

# Driver
from specfit.core.fitting.optimizer import OptimizationResult, fit_parameters, least_squares_fit
from specfit.core.fitting.parameters import Parameter, Parameters, ParameterType

# Peak decomposition
from specfit.core.fitting.peaks import fit_peaks, fit_ta_spectrum, slice_region

__all__ = [
    "OptimizationResult",
    "Parameter",
    "ParameterType",
    "Parameters",
    "fit_exp_decay",
    "fit_global",
    "fit_parameters",
    "fit_peaks",
    "fit_ta_spectrum",
    "initial_decay_guess",
    "least_squares_fit",
    "predict",
    "predict_baseline",
    "predict_peak",
    "residuals",
    "slice_region",
]
