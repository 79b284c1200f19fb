"""Parameter estimate records.

This module defines the immutable record holding a fitted parameter value
with its standard error and a Student-t confidence interval.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True, slots=True)
class ParameterEstimate:
    """A fitted parameter value with uncertainties.

    Attributes
    ----------
        name: Parameter identifier (e.g., "center", "tau_1")
        value: Best-fit estimate
        err: Standard error (NaN when the covariance is unavailable, 0 when fixed)
        ci: Two-sided confidence interval ``(lower, upper)``
        unit: Physical unit string
        is_fixed: Whether the parameter was held fixed during fitting
        min_bound: Lower fitting bound
        max_bound: Upper fitting bound

    Example:
        >>> est = ParameterEstimate("center", 2060.0, 0.02, (2059.96, 2060.04))
        >>> est.format_value(2)
        '2060.00 ± 0.02'
    """

    name: str
    value: float
    err: float
    ci: tuple[float, float] = (np.nan, np.nan)
    unit: str = ""
    is_fixed: bool = False
    min_bound: float = field(default=-np.inf)
    max_bound: float = field(default=np.inf)

    @property
    def std_error(self) -> float:
        return self.err

    @property
    def has_uncertainty(self) -> bool:
        """False when the standard error could not be computed."""
        return bool(np.isfinite(self.err))

    @property
    def relative_error(self) -> float | None:
        """Relative uncertainty (err / |value|), or None if value is zero."""
        if abs(self.value) < 1e-15 or not self.has_uncertainty:
            return None
        return abs(self.err / self.value)

    def is_at_boundary(self, tolerance: float = 1e-6) -> bool:
        """Check if value is at or near fitting bounds."""
        scale = tolerance * (1.0 + abs(self.value))
        at_min = np.isfinite(self.min_bound) and abs(self.value - self.min_bound) < scale
        at_max = np.isfinite(self.max_bound) and abs(self.value - self.max_bound) < scale
        return bool(at_min or at_max)

    def format_value(self, precision: int = 4) -> str:
        """Format value with uncertainty, e.g. "25.3000 ± 1.2000"."""
        if not self.has_uncertainty:
            return f"{self.value:.{precision}f} ± n/a"
        return f"{self.value:.{precision}f} ± {self.err:.{precision}f}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON/TOML serialization."""
        result = {
            "name": self.name,
            "value": self.value,
            "err": self.err,
            "ci": list(self.ci),
            "is_fixed": self.is_fixed,
        }
        if self.unit:
            result["unit"] = self.unit
        return result

    def __float__(self) -> float:
        return float(self.value)


__all__ = ["ParameterEstimate"]
