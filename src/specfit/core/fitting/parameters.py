"""Parameter management for spectroscopy curve fitting."""

from __future__ import annotations

from collections.abc import ItemsView, Iterator, KeysView, ValuesView  # noqa: TC003
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

import numpy as np


class ParameterType(str, Enum):
    """Types of fitting parameters."""

    AMPLITUDE = "amplitude"  # Peak height or decay amplitude
    CENTER = "center"  # Peak position in x units
    WIDTH = "width"  # FWHM or sigma of a peak
    FRACTION = "fraction"  # Mixing parameter (0-1)
    BASELINE = "baseline"  # Polynomial baseline coefficient
    TAU = "tau"  # Decay time constant
    TIME_ZERO = "time_zero"  # Time zero of a kinetic trace
    IRF_WIDTH = "irf_width"  # Gaussian IRF sigma
    OFFSET = "offset"  # Constant offset
    GENERIC = "generic"  # Other parameters


# Default bounds for parameter types
_DEFAULT_BOUNDS: dict[ParameterType, tuple[float, float]] = {
    ParameterType.AMPLITUDE: (-np.inf, np.inf),  # Negative for bleach/absorption dips
    ParameterType.CENTER: (-np.inf, np.inf),  # Set from the fitted region
    ParameterType.WIDTH: (0.0, np.inf),
    ParameterType.FRACTION: (0.0, 1.0),
    ParameterType.BASELINE: (-np.inf, np.inf),
    ParameterType.TAU: (0.0, np.inf),
    ParameterType.TIME_ZERO: (-np.inf, np.inf),
    ParameterType.IRF_WIDTH: (0.0, np.inf),
    ParameterType.OFFSET: (-np.inf, np.inf),
    ParameterType.GENERIC: (-np.inf, np.inf),
}


class Parameter(BaseModel):
    """Single fitting parameter with bounds and metadata."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    name: str
    value: float
    min: float = -np.inf
    max: float = np.inf
    vary: bool = True
    param_type: ParameterType = ParameterType.GENERIC
    unit: str = ""

    @model_validator(mode="before")
    @classmethod
    def set_type_defaults(cls, data: Any) -> Any:
        """Apply type-specific defaults for bounds if not explicitly set."""
        if not isinstance(data, dict):
            return data

        param_type_raw = data.get("param_type", ParameterType.GENERIC)
        if isinstance(param_type_raw, str):
            try:
                param_type = ParameterType(param_type_raw)
            except ValueError:
                # Let standard validation handle invalid enum values
                return data
        else:
            param_type = param_type_raw

        default_min, default_max = _DEFAULT_BOUNDS[param_type]
        if data.get("min", -np.inf) == -np.inf:
            data["min"] = default_min
        if data.get("max", np.inf) == np.inf:
            data["max"] = default_max
        return data

    @model_validator(mode="after")
    def validate_parameter(self) -> Parameter:
        """Validate parameter bounds."""
        if self.min > self.max:
            msg = f"Parameter {self.name}: min ({self.min}) > max ({self.max})"
            raise ValueError(msg)

        if not self.min <= self.value <= self.max:
            msg = (
                f"Parameter {self.name}: value ({self.value}) "
                f"outside bounds [{self.min}, {self.max}]"
            )
            raise ValueError(msg)
        return self

    def __repr__(self) -> str:
        """Return a string representation of the parameter."""
        vary_str = "vary" if self.vary else "fixed"
        min_str = f"{self.min:.4g}" if self.min > -1e10 else "-inf"
        max_str = f"{self.max:.4g}" if self.max < 1e10 else "inf"
        unit_str = f" {self.unit}" if self.unit else ""
        return (
            f"<Parameter {self.name}={self.value:.6g}{unit_str} "
            f"[{min_str}, {max_str}] ({vary_str})>"
        )


class Parameters(BaseModel):
    """Ordered collection of fitting parameters.

    Insertion order defines the layout of the full parameter vector handed to
    model functions. Fixed parameters stay in that vector; only the varying
    subset is exposed to the optimizer.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    params: dict[str, Parameter] = Field(default_factory=dict)

    def add(
        self,
        name: str,
        value: float = 0.0,
        min: float = -np.inf,
        max: float = np.inf,
        vary: bool = True,
        param_type: ParameterType = ParameterType.GENERIC,
        unit: str = "",
    ) -> None:
        """Add a parameter.

        The initial value is clipped into the (type-default or explicit)
        bounds so that heuristic guesses never fail validation.
        """
        default_min, default_max = _DEFAULT_BOUNDS[param_type]
        lower = default_min if min == -np.inf else min
        upper = default_max if max == np.inf else max
        value = float(np.clip(value, lower, upper))
        self.params[name] = Parameter(
            name=name,
            value=value,
            min=lower,
            max=upper,
            vary=vary,
            param_type=param_type,
            unit=unit,
        )

    def __getitem__(self, key: str) -> Parameter:
        """Get parameter by name."""
        return self.params[key]

    def __contains__(self, key: str) -> bool:
        """Check if parameter exists."""
        return key in self.params

    def __iter__(self) -> Iterator[str]:
        """Iterate over parameter names."""
        return iter(self.params)

    def __len__(self) -> int:
        """Return number of parameters."""
        return len(self.params)

    def keys(self) -> KeysView[str]:
        """Get parameter names."""
        return self.params.keys()

    def values(self) -> ValuesView[Parameter]:
        """Get parameter objects."""
        return self.params.values()

    def items(self) -> ItemsView[str, Parameter]:
        """Get parameter name-value pairs."""
        return self.params.items()

    def get_names(self) -> list[str]:
        """Get all parameter names in vector order."""
        return list(self.params)

    def get_values(self) -> np.ndarray:
        """Get all parameter values as the full parameter vector."""
        return np.array([param.value for param in self.params.values()], dtype=float)

    def get_vary_mask(self) -> np.ndarray:
        """Boolean mask of varying parameters over the full vector."""
        return np.array([param.vary for param in self.params.values()], dtype=bool)

    def get_vary_names(self) -> list[str]:
        """Get names of parameters that vary."""
        return [name for name, param in self.params.items() if param.vary]

    def __repr__(self) -> str:
        """Return a string representation of the parameters collection."""
        n_total = len(self.params)
        n_vary = len(self.get_vary_names())
        return f"<Parameters: {n_total} total, {n_vary} varying>"

    def summary(self) -> str:
        """Get a formatted summary of all parameters."""
        lines = ["Parameters:", "=" * 60]
        for name, param in self.params.items():
            vary_str = "vary" if param.vary else "fixed"
            min_str = f"{param.min:.4g}" if param.min > -1e10 else "-inf"
            max_str = f"{param.max:.4g}" if param.max < 1e10 else "inf"
            lines.append(
                f"  {name:20s} = {param.value:12.6g} [{min_str:>10s}, {max_str:<10s}] ({vary_str})"
            )
        lines.append("=" * 60)
        return "\n".join(lines)


__all__ = ["Parameter", "ParameterType", "Parameters"]
