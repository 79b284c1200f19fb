"""Baseline estimation algorithms and the correction dispatcher."""

from specfit.core.baseline.correction import (
    BaselineResult,
    correct_baseline,
    correct_signal_baseline,
    estimate_baseline,
    list_baseline_methods,
)
from specfit.core.baseline.penalized import als_baseline, arpls_baseline
from specfit.core.baseline.snip import snip_baseline

__all__ = [
    "BaselineResult",
    "als_baseline",
    "arpls_baseline",
    "correct_baseline",
    "correct_signal_baseline",
    "estimate_baseline",
    "list_baseline_methods",
    "snip_baseline",
]
