"""Peak model registry for name-based lineshape lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from specfit.core.lineshapes.functions import (
    SIGMA_TO_FWHM,
    gaussian,
    gaussian_area,
    lorentzian,
    lorentzian_area,
    pseudo_voigt,
    pseudo_voigt_area,
)
from specfit.core.shared.exceptions import UsageError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from specfit.core.shared.typing import ArrayLike, FloatArray, ModelFunction


@dataclass(frozen=True)
class PeakModel:
    """A single-peak lineshape as used by the decomposition fitter.

    Attributes
    ----------
        name: Canonical model name
        function: ``f(peak_params, x)`` evaluating one peak without offset
        param_names: Names of the per-peak parameters, in vector order
        width_name: Name of the width parameter ("fwhm" or "sigma")
        area: Analytic integral of one peak from its parameters
    """

    name: str
    function: ModelFunction
    param_names: tuple[str, ...]
    width_name: str
    area: Callable[[Sequence[float]], float]

    @property
    def n_params(self) -> int:
        return len(self.param_names)

    def evaluate(self, params: ArrayLike, x: ArrayLike) -> FloatArray:
        return self.function(params, x)

    def fwhm(self, params: Sequence[float]) -> float:
        """Full width at half maximum of one peak."""
        width = params[2]
        return SIGMA_TO_FWHM * width if self.width_name == "sigma" else width


# Global model registry
PEAK_MODELS: dict[str, PeakModel] = {}


def register_peak_model(
    names: str | Iterable[str],
    *,
    param_names: Sequence[str],
    width_name: str,
    area: Callable[[Sequence[float]], float],
) -> Callable[[ModelFunction], ModelFunction]:
    """Register a single-peak model function.

    Args:
        names: Single name or iterable of names; the first is canonical
        param_names: Per-peak parameter names in vector order
        width_name: Name of the width parameter
        area: Analytic integral from the per-peak parameters

    Returns
    -------
        Decorator that registers the model function

    Example:
        @register_peak_model("gaussian", param_names=("amplitude", "center", "fwhm"),
                             width_name="fwhm", area=...)
        def _gaussian_peak(p, x):
            ...
    """
    if isinstance(names, str):
        names = [names]
    names = list(names)

    def decorator(function: ModelFunction) -> ModelFunction:
        model = PeakModel(
            name=names[0],
            function=function,
            param_names=tuple(param_names),
            width_name=width_name,
            area=area,
        )
        for name in names:
            PEAK_MODELS[name] = model
        return function

    return decorator


def get_peak_model(name: str | PeakModel) -> PeakModel:
    """Get a peak model by name.

    Raises
    ------
        UsageError: If the model name is not registered
    """
    if isinstance(name, PeakModel):
        return name
    try:
        return PEAK_MODELS[name.lower()]
    except KeyError:
        available = ", ".join(sorted(PEAK_MODELS))
        msg = f"Unknown peak model '{name}'. Available: {available}"
        raise UsageError(msg) from None


def peak_area(model: str | PeakModel, amplitude: float, width: float, eta: float = 0.5) -> float:
    """Analytic integral of one peak; ``width`` is the model's own width parameter."""
    peak_model = get_peak_model(model)
    if peak_model.width_name == "sigma":
        return float(peak_model.area((amplitude, 0.0, width, eta)))
    return float(peak_model.area((amplitude, 0.0, width)))


def list_peak_models() -> list[str]:
    """List canonical names of registered peak models."""
    return sorted({model.name for model in PEAK_MODELS.values()})


# =============================================================================
# Built-in Models
# =============================================================================


@register_peak_model(
    ["lorentzian", "lorentz"],
    param_names=("amplitude", "center", "fwhm"),
    width_name="fwhm",
    area=lambda p: lorentzian_area(p[0], p[2]),
)
def _lorentzian_peak(params: ArrayLike, x: ArrayLike) -> FloatArray:
    return lorentzian((params[0], params[1], params[2], 0.0), x)


@register_peak_model(
    ["gaussian", "gauss"],
    param_names=("amplitude", "center", "fwhm"),
    width_name="fwhm",
    area=lambda p: gaussian_area(p[0], p[2]),
)
def _gaussian_peak(params: ArrayLike, x: ArrayLike) -> FloatArray:
    return gaussian((params[0], params[1], params[2], 0.0), x)


@register_peak_model(
    ["pseudo_voigt", "pvoigt", "voigt"],
    param_names=("amplitude", "center", "sigma", "eta"),
    width_name="sigma",
    area=lambda p: pseudo_voigt_area(p[0], p[2], p[3]),
)
def _pseudo_voigt_peak(params: ArrayLike, x: ArrayLike) -> FloatArray:
    return pseudo_voigt(params, x)


__all__ = [
    "PEAK_MODELS",
    "PeakModel",
    "get_peak_model",
    "list_peak_models",
    "peak_area",
    "register_peak_model",
]
