"""Pure NumPy lineshape and kinetic model functions.

Every model is a pure function ``f(params, x) -> y``. Models only use NumPy
(and ``scipy.special``) element-wise operations and never force a floating
point storage type, so they accept any numeric array-like input.

Architecture
------------
Two families of models:

1. **Peak lineshapes** (Lorentzian, Gaussian, Pseudo-Voigt):
   - Height-normalized so that the value at the center equals the amplitude
   - Parameterized by FWHM (Lorentzian, Gaussian) or by sigma (Pseudo-Voigt)

2. **Kinetic models** (step exponential, IRF-convolved exponential):
   - Parameterized by amplitude, time constant ``tau`` and time zero ``t0``
   - The IRF-convolved model is the closed-form convolution of a Gaussian
     instrument response (standard deviation ``sigma``) with a step-started
     exponential decay

Nothing here validates its inputs: invalid parameters (zero width, negative
tau) propagate as NaN/Inf and are kept out of reach by parameter bounds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.special import erfc, erfcx

if TYPE_CHECKING:
    from specfit.core.shared.typing import ArrayLike, FloatArray

# =============================================================================
# Module-Level Constants
# =============================================================================

_LN2 = np.log(2.0)
_SQRT2 = np.sqrt(2.0)
_SQRT_PI_4LN2 = np.sqrt(np.pi / (4.0 * _LN2))
SIGMA_TO_FWHM = 2.0 * np.sqrt(2.0 * _LN2)


# =============================================================================
# Peak Lineshapes
# =============================================================================


def lorentzian(params: ArrayLike, x: ArrayLike) -> FloatArray:
    """Lorentzian peak.

    L(x) = A * γ² / (γ² + (x - x0)²) + offset,  γ = fwhm / 2

    Args:
        params: ``[amplitude, center, fwhm, offset]``
        x: Independent variable

    Returns
    -------
        Model values at ``x``
    """
    amplitude, center, fwhm, offset = params[0], params[1], params[2], params[3]
    dx = np.asarray(x) - center
    gamma2 = 0.25 * fwhm * fwhm
    return amplitude * gamma2 / (gamma2 + dx * dx) + offset


def gaussian(params: ArrayLike, x: ArrayLike) -> FloatArray:
    """Gaussian peak.

    G(x) = A * exp(-4 ln2 (x - x0)² / fwhm²) + offset

    Args:
        params: ``[amplitude, center, fwhm, offset]``
        x: Independent variable

    Returns
    -------
        Model values at ``x``
    """
    amplitude, center, fwhm, offset = params[0], params[1], params[2], params[3]
    dx = np.asarray(x) - center
    return amplitude * np.exp(-4.0 * _LN2 * dx * dx / (fwhm * fwhm)) + offset


def pseudo_voigt(params: ArrayLike, x: ArrayLike) -> FloatArray:
    """Pseudo-Voigt peak.

    V(x) = A * (η L(x) + (1 - η) G(x))

    Both components share the FWHM ``2 sqrt(2 ln2) σ``, so ``eta = 0`` is the
    Gaussian of standard deviation ``σ`` and ``eta = 1`` the Lorentzian with
    the same FWHM.

    Args:
        params: ``[amplitude, center, sigma, eta]``
        x: Independent variable
    """
    amplitude, center, sigma, eta = params[0], params[1], params[2], params[3]
    dx = np.asarray(x) - center
    dx2 = dx * dx
    fwhm = SIGMA_TO_FWHM * sigma
    gamma2 = 0.25 * fwhm * fwhm
    lorentz = gamma2 / (gamma2 + dx2)
    gauss = np.exp(-0.5 * dx2 / (sigma * sigma))
    return amplitude * (eta * lorentz + (1.0 - eta) * gauss)


def lorentzian_area(amplitude: float, fwhm: float) -> float:
    """Analytical integral: A * π * fwhm / 2."""
    return amplitude * np.pi * fwhm / 2.0


def gaussian_area(amplitude: float, fwhm: float) -> float:
    """Analytical integral: A * fwhm * sqrt(π / (4 ln2))."""
    return amplitude * fwhm * _SQRT_PI_4LN2


def pseudo_voigt_area(amplitude: float, sigma: float, eta: float) -> float:
    """Analytical integral of the shared-FWHM pseudo-Voigt."""
    fwhm = SIGMA_TO_FWHM * sigma
    return eta * lorentzian_area(amplitude, fwhm) + (1.0 - eta) * gaussian_area(amplitude, fwhm)


# =============================================================================
# Kinetic Models
# =============================================================================


def exp_decay(params: ArrayLike, t: ArrayLike) -> FloatArray:
    """Step-started exponential decay.

    S(t) = offset                              for t <  t0
    S(t) = A * exp(-(t - t0) / τ) + offset     for t >= t0

    The value before ``t0`` is exactly ``offset``.

    Args:
        params: ``[amplitude, tau, t0, offset]``
        t: Time axis
    """
    amplitude, tau, t0, offset = params[0], params[1], params[2], params[3]
    dt = np.asarray(t) - t0
    decay = amplitude * np.exp(-np.maximum(dt, 0.0) / tau)
    return np.where(dt >= 0.0, decay, 0.0) + offset


def irf_exp_decay(params: ArrayLike, t: ArrayLike) -> FloatArray:
    """Exponential decay convolved with a Gaussian instrument response.

    S(t) = (A/2) exp(σ²/(2τ²) - (t - t0)/τ) erfc((σ²/τ - (t - t0)) / (σ√2)) + offset

    With ``z = (σ²/τ - u) / (σ√2)`` and ``u = t - t0`` the product
    ``exp(...) erfc(z)`` equals ``exp(-u²/(2σ²)) erfcx(z)``. The scaled form is
    used on the rising edge (z >= 0) and the direct form on the decaying side
    (z < 0), so neither branch overflows. As σ -> 0 the model converges to
    :func:`exp_decay` everywhere except at ``t == t0`` where it takes the step
    midpoint ``A/2 + offset``.

    Args:
        params: ``[amplitude, tau, t0, sigma, offset]``
        t: Time axis
    """
    amplitude, tau, t0, sigma, offset = params[0], params[1], params[2], params[3], params[4]
    u = np.asarray(t) - t0
    sigma2 = sigma * sigma
    shift = sigma2 / tau
    z = (shift - u) / (sigma * _SQRT2)

    rising = np.exp(-u * u / (2.0 * sigma2)) * erfcx(np.maximum(z, 0.0))
    exponent = sigma2 / (2.0 * tau * tau) - np.maximum(u, shift) / tau
    decaying = np.exp(exponent) * erfc(np.minimum(z, 0.0))

    return 0.5 * amplitude * np.where(z >= 0.0, rising, decaying) + offset


__all__ = [
    "SIGMA_TO_FWHM",
    "exp_decay",
    "gaussian",
    "gaussian_area",
    "irf_exp_decay",
    "lorentzian",
    "lorentzian_area",
    "pseudo_voigt",
    "pseudo_voigt_area",
]
