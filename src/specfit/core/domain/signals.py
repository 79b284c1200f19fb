"""Signal containers: 1-D spectra, 1-D kinetic traces and 2-D matrices.

Containers are a tagged family. Each carries a :class:`SignalKind` tag, and
fitting entry points dispatch on that tag instead of inspecting Python types.
All arrays are copied on construction and made read-only, so a container can
be shared freely between fits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np

from specfit.core.shared.exceptions import UsageError

if TYPE_CHECKING:
    from specfit.core.shared.typing import ArrayLike, FloatArray


class SignalKind(str, Enum):
    """Tag identifying the shape of a signal container."""

    SPECTRUM = "spectrum"
    TRACE = "trace"
    MATRIX = "matrix"


def _frozen_array(values: ArrayLike, name: str, ndim: int = 1) -> FloatArray:
    array = np.array(values, dtype=float)
    if array.ndim != ndim:
        msg = f"'{name}' must be {ndim}-dimensional, got shape {array.shape}"
        raise UsageError(msg)
    array.setflags(write=False)
    return array


def _check_lengths(x: FloatArray, y: FloatArray, x_name: str, y_name: str) -> None:
    if x.shape != y.shape:
        msg = f"'{x_name}' and '{y_name}' must have equal lengths ({x.size} != {y.size})"
        raise UsageError(msg)


@dataclass(frozen=True)
class Spectrum:
    """A 1-D spectrum: intensity ``y`` sampled on axis ``x``."""

    x: FloatArray
    y: FloatArray
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _frozen_array(self.x, "x"))
        object.__setattr__(self, "y", _frozen_array(self.y, "y"))
        object.__setattr__(self, "metadata", dict(self.metadata))
        _check_lengths(self.x, self.y, "x", "y")

    @property
    def kind(self) -> SignalKind:
        return SignalKind.SPECTRUM

    @property
    def is_matrix(self) -> bool:
        return False

    @property
    def sample_id(self) -> str:
        return str(self.metadata.get("sample_id", ""))

    def xdata(self) -> FloatArray:
        return self.x

    def ydata(self) -> FloatArray:
        return self.y

    def __len__(self) -> int:
        return self.x.size


@dataclass(frozen=True)
class KineticTrace:
    """A 1-D kinetic trace: ``signal`` sampled at ``time``."""

    time: FloatArray
    signal: FloatArray
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "time", _frozen_array(self.time, "time"))
        object.__setattr__(self, "signal", _frozen_array(self.signal, "signal"))
        object.__setattr__(self, "metadata", dict(self.metadata))
        _check_lengths(self.time, self.signal, "time", "signal")

    @property
    def kind(self) -> SignalKind:
        return SignalKind.TRACE

    @property
    def is_matrix(self) -> bool:
        return False

    @property
    def sample_id(self) -> str:
        return str(self.metadata.get("sample_id", ""))

    def xdata(self) -> FloatArray:
        return self.time

    def ydata(self) -> FloatArray:
        return self.signal

    def __len__(self) -> int:
        return self.time.size


@dataclass(frozen=True)
class SignalMatrix:
    """A 2-D time x wavelength matrix, e.g. a broadband transient absorption map.

    ``data[i, j]`` is the signal at ``time[i]`` and ``wavelength[j]``.
    """

    time: FloatArray
    wavelength: FloatArray
    data: FloatArray
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "time", _frozen_array(self.time, "time"))
        object.__setattr__(self, "wavelength", _frozen_array(self.wavelength, "wavelength"))
        object.__setattr__(self, "data", _frozen_array(self.data, "data", ndim=2))
        object.__setattr__(self, "metadata", dict(self.metadata))
        expected = (self.time.size, self.wavelength.size)
        if self.data.shape != expected:
            msg = f"'data' must have shape {expected}, got {self.data.shape}"
            raise UsageError(msg)

    @property
    def kind(self) -> SignalKind:
        return SignalKind.MATRIX

    @property
    def is_matrix(self) -> bool:
        return True

    @property
    def sample_id(self) -> str:
        return str(self.metadata.get("sample_id", ""))

    def xdata(self) -> FloatArray:
        return self.time

    def ydata(self) -> FloatArray:
        return self.data

    @property
    def shape(self) -> tuple[int, int]:
        return self.data.shape

    def trace_at(self, wavelength: float) -> KineticTrace:
        """Kinetic trace at the wavelength column nearest to ``wavelength``."""
        index = int(np.argmin(np.abs(self.wavelength - wavelength)))
        metadata = {**self.metadata, "wavelength": float(self.wavelength[index])}
        return KineticTrace(self.time, self.data[:, index], metadata)

    def spectrum_at(self, time: float) -> Spectrum:
        """Spectrum at the time row nearest to ``time``."""
        index = int(np.argmin(np.abs(self.time - time)))
        metadata = {**self.metadata, "time": float(self.time[index])}
        return Spectrum(self.wavelength, self.data[index, :], metadata)


Signal = Spectrum | KineticTrace | SignalMatrix


def require_1d(signal: Signal, operation: str) -> None:
    """Raise :class:`UsageError` when ``signal`` is a 2-D matrix."""
    if signal.kind is SignalKind.MATRIX:
        msg = (
            f"{operation} needs a 1-D signal; extract one with "
            "SignalMatrix.trace_at() or SignalMatrix.spectrum_at()"
        )
        raise UsageError(msg)


def signal_axis(signal: Signal) -> FloatArray:
    """Independent axis of a 1-D signal, selected by its kind tag."""
    require_1d(signal, "Axis lookup")
    if signal.kind is SignalKind.SPECTRUM:
        return signal.x
    return signal.time


__all__ = [
    "KineticTrace",
    "Signal",
    "SignalKind",
    "SignalMatrix",
    "Spectrum",
    "require_1d",
    "signal_axis",
]
