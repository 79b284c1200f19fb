"""Shared types and exceptions."""

from specfit.core.shared.exceptions import (
    ConfigError,
    ConvergenceWarning,
    DataIOError,
    InputDataError,
    SpecFitError,
    UsageError,
)

__all__ = [
    "ConfigError",
    "ConvergenceWarning",
    "DataIOError",
    "InputDataError",
    "SpecFitError",
    "UsageError",
]
