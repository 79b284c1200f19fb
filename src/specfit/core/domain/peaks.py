"""Peak candidates and the default peak-detection oracle.

Detection only seeds initial guesses for the decomposition fitter. Any
callable matching :class:`PeakDetector` can replace the default, including
one that returns no candidates at all.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np
from scipy import signal

if TYPE_CHECKING:
    from specfit.core.shared.typing import ArrayLike

logger = logging.getLogger(__name__)

# Default prominence as a fraction of the signal's peak-to-peak range
DEFAULT_PROMINENCE_FRACTION = 0.05


@dataclass(frozen=True, slots=True)
class PeakCandidate:
    """A detected peak.

    Attributes
    ----------
        position: Peak position in x units
        intensity: Signal value at the peak (negative for dips)
        prominence: Prominence of the peak (always positive)
        width: Full width at half prominence in x units
        bounds: ``(left, right)`` x positions of the half-prominence crossings
    """

    position: float
    intensity: float
    prominence: float
    width: float
    bounds: tuple[float, float]


class PeakDetector(Protocol):
    """Callable returning peak candidates for a 1-D signal."""

    def __call__(self, x: ArrayLike, y: ArrayLike) -> Sequence[PeakCandidate]: ...


def _detect_one_sign(
    x: np.ndarray, y: np.ndarray, sign: float, prominence: float, distance: int | None
) -> list[PeakCandidate]:
    indices, properties = signal.find_peaks(sign * y, prominence=prominence, distance=distance)
    if indices.size == 0:
        return []
    prominence_data = (
        properties["prominences"],
        properties["left_bases"],
        properties["right_bases"],
    )
    widths, _, left_ips, right_ips = signal.peak_widths(
        sign * y, indices, rel_height=0.5, prominence_data=prominence_data
    )
    samples = np.arange(x.size, dtype=float)
    left = np.interp(left_ips, samples, x)
    right = np.interp(right_ips, samples, x)
    step = float(np.median(np.abs(np.diff(x)))) if x.size > 1 else 1.0
    return [
        PeakCandidate(
            position=float(x[i]),
            intensity=float(y[i]),
            prominence=float(prom),
            width=float(width * step),
            bounds=(float(min(lo, hi)), float(max(lo, hi))),
        )
        for i, prom, width, lo, hi in zip(
            indices, properties["prominences"], widths, left, right, strict=True
        )
    ]


def find_peaks(
    x: ArrayLike,
    y: ArrayLike,
    *,
    prominence: float | None = None,
    min_distance: float | None = None,
    negative: bool = True,
) -> list[PeakCandidate]:
    """Detect peaks (and, by default, dips) with ``scipy.signal.find_peaks``.

    Args:
        x: Independent variable (monotonic)
        y: Signal
        prominence: Minimum prominence; defaults to 5% of the signal range
        min_distance: Minimum separation between peaks in x units
        negative: Also detect negative-going peaks

    Returns
    -------
        Candidates sorted by position
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if y.size < 3:
        return []

    span = float(np.ptp(y))
    if span == 0.0:
        return []
    if prominence is None:
        prominence = DEFAULT_PROMINENCE_FRACTION * span

    distance = None
    if min_distance is not None:
        step = float(np.median(np.abs(np.diff(x))))
        distance = max(1, int(round(min_distance / step))) if step > 0 else None

    candidates = _detect_one_sign(x, y, 1.0, prominence, distance)
    if negative:
        candidates += _detect_one_sign(x, y, -1.0, prominence, distance)
    candidates.sort(key=lambda c: c.position)
    logger.debug("Detected %d peak candidates", len(candidates))
    return candidates


def most_prominent(candidates: Sequence[PeakCandidate], n: int) -> list[PeakCandidate]:
    """The ``n`` most prominent candidates, sorted by position."""
    ranked = sorted(candidates, key=lambda c: c.prominence, reverse=True)[:n]
    return sorted(ranked, key=lambda c: c.position)


__all__ = [
    "PeakCandidate",
    "PeakDetector",
    "find_peaks",
    "most_prominent",
]
