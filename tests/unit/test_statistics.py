"""Test fit statistics and parameter estimates."""

import pytest

import numpy as np

from specfit.core.results.estimates import ParameterEstimate
from specfit.core.results.statistics import (
    compute_r_squared,
    compute_rss,
    compute_total_sum_of_squares,
)


class TestStatisticFunctions:
    """Tests for the scalar statistic helpers."""

    def test_rss(self):
        """RSS should be the sum of squared residuals."""
        assert compute_rss(np.array([1.0, -2.0, 2.0])) == pytest.approx(9.0)

    def test_total_sum_of_squares(self):
        """Total sum of squares should be taken about the mean."""
        assert compute_total_sum_of_squares(np.array([1.0, 2.0, 3.0])) == pytest.approx(2.0)

    def test_r_squared(self):
        """R² should be 1 - RSS/TSS."""
        assert compute_r_squared(1.0, 4.0) == pytest.approx(0.75)


class TestParameterEstimate:
    """Tests for ParameterEstimate."""

    def test_format_value(self):
        """Should format value with uncertainty."""
        estimate = ParameterEstimate("center", 2060.0, 0.02, (2059.96, 2060.04))
        assert estimate.format_value(2) == "2060.00 ± 0.02"

    def test_missing_uncertainty(self):
        """NaN errors should be reported as unavailable."""
        estimate = ParameterEstimate("tau", 1.0, np.nan)
        assert not estimate.has_uncertainty
        assert estimate.relative_error is None
        assert estimate.format_value(1) == "1.0 ± n/a"

    def test_boundary(self):
        """Values on a finite bound should be flagged."""
        estimate = ParameterEstimate("eta", 1.0, 0.0, min_bound=0.0, max_bound=1.0)
        assert estimate.is_at_boundary()
        assert not ParameterEstimate("x", 0.5, 0.1).is_at_boundary()

    def test_to_dict_and_float(self):
        """Should serialize and convert to float."""
        estimate = ParameterEstimate("tau_1", 2.5, 0.1, (2.3, 2.7), unit="ps")
        data = estimate.to_dict()
        assert data["ci"] == [2.3, 2.7]
        assert data["unit"] == "ps"
        assert float(estimate) == 2.5
