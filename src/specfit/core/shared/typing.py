"""Shared typing aliases used across specfit."""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt

FloatArray = npt.NDArray[np.float64 | np.float32]
IntArray = npt.NDArray[np.int_]
ArrayLike = npt.ArrayLike

# f(params, x) -> y
ModelFunction = Callable[[FloatArray, FloatArray], FloatArray]
