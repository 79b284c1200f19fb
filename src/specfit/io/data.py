"""Plain numeric column files.

Only whitespace- or comma-separated numeric columns are read; leading
header lines that do not parse as numbers are skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from specfit.core.domain.signals import KineticTrace, Spectrum
from specfit.core.shared.exceptions import DataIOError

if TYPE_CHECKING:
    from pathlib import Path

    from specfit.core.shared.typing import FloatArray

logger = logging.getLogger(__name__)


def _delimiter(path: Path) -> str | None:
    return "," if path.suffix.lower() == ".csv" else None


def _count_header_lines(path: Path, delimiter: str | None) -> int:
    with path.open(encoding="utf-8") as f:
        for n, line in enumerate(f):
            fields = line.strip().split(delimiter)
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            try:
                [float(value) for value in fields if value.strip()]
            except ValueError:
                continue
            return n
    return 0


def load_columns(path: Path, columns: tuple[int, int] = (0, 1)) -> tuple[FloatArray, FloatArray]:
    """Load two numeric columns.

    Args:
        path: Text file with whitespace- or comma-separated columns
        columns: Zero-based indices of the x and y columns

    Returns
    -------
        ``(x, y)`` arrays

    Raises
    ------
        DataIOError: If the file is missing, unreadable, or lacks the columns
    """
    if not path.exists():
        msg = f"Data file not found: {path}"
        raise DataIOError(msg)

    delimiter = _delimiter(path)
    try:
        skiprows = _count_header_lines(path, delimiter)
        data = np.loadtxt(
            path, delimiter=delimiter, comments="#", skiprows=skiprows, ndmin=2
        )
    except (OSError, UnicodeDecodeError, ValueError) as e:
        msg = f"Could not read numeric columns from {path}: {e}"
        raise DataIOError(msg) from e

    if data.shape[0] == 0 or data.shape[1] <= max(columns):
        msg = f"{path} has {data.shape[1]} column(s); columns {columns} were requested"
        raise DataIOError(msg)

    logger.debug("Loaded %d rows from %s", data.shape[0], path)
    return data[:, columns[0]].copy(), data[:, columns[1]].copy()


def load_spectrum(path: Path, columns: tuple[int, int] = (0, 1)) -> Spectrum:
    """Load a :class:`Spectrum`; the file stem becomes its ``sample_id``."""
    x, y = load_columns(path, columns)
    return Spectrum(x, y, {"sample_id": path.stem, "source": str(path)})


def load_trace(path: Path, columns: tuple[int, int] = (0, 1)) -> KineticTrace:
    """Load a :class:`KineticTrace`; the file stem becomes its ``sample_id``."""
    t, s = load_columns(path, columns)
    return KineticTrace(t, s, {"sample_id": path.stem, "source": str(path)})


__all__ = ["load_columns", "load_spectrum", "load_trace"]
