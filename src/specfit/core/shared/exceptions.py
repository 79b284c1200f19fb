"""Exception taxonomy for specfit.

Usage errors signal a programming mistake upstream and are raised immediately.
Numerical trouble during a fit is never raised: it is reported on the result
object (``converged=False``, non-finite uncertainties) and, for
non-convergence, through :class:`ConvergenceWarning`.
"""

from __future__ import annotations


class SpecFitError(Exception):
    """Base class for all specfit-specific exceptions."""


class UsageError(SpecFitError, ValueError):
    """Caller contract violations (length mismatches, too few points, bad names)."""


class InputDataError(SpecFitError, ValueError):
    """Input data with nothing to fit (empty region, all-NaN signal)."""


class ConfigError(SpecFitError):
    """Configuration-related errors (invalid/missing options, schema issues)."""


class DataIOError(SpecFitError):
    """Data loading/saving errors (files, formats, permissions)."""


class ConvergenceWarning(UserWarning):
    """Warning for fits that stopped before meeting the convergence criteria."""


__all__ = [
    "ConfigError",
    "ConvergenceWarning",
    "DataIOError",
    "InputDataError",
    "SpecFitError",
    "UsageError",
]
