"""Test multi-peak decomposition."""

import pytest

import numpy as np

from specfit.core.domain.signals import SignalMatrix, Spectrum
from specfit.core.fitting import accessors
from specfit.core.fitting.peaks import (
    estimate_edge_baseline,
    fit_peaks,
    fit_ta_spectrum,
    initial_peak_guesses,
    slice_region,
)
from specfit.core.lineshapes.functions import gaussian, lorentzian
from specfit.core.shared.exceptions import InputDataError, UsageError


class TestSliceRegion:
    """Tests for region selection."""

    def test_open_interval(self):
        """Endpoints equal to the region bounds should be excluded."""
        x = np.arange(10.0)
        xs, ys = slice_region(x, x * 2, (2.0, 5.0))
        np.testing.assert_array_equal(xs, [3.0, 4.0])
        np.testing.assert_array_equal(ys, [6.0, 8.0])

    def test_drops_non_finite_and_sorts(self):
        """NaNs should be removed and x sorted ascending."""
        x = np.array([3.0, 1.0, np.nan, 2.0])
        y = np.array([30.0, 10.0, 5.0, np.inf])
        xs, ys = slice_region(x, y, None)
        np.testing.assert_array_equal(xs, [1.0, 3.0])
        np.testing.assert_array_equal(ys, [10.0, 30.0])

    def test_reversed_region(self):
        """Region bounds given high-to-low should still work."""
        xs, _ = slice_region(np.arange(10.0), np.arange(10.0), (5.0, 2.0))
        np.testing.assert_array_equal(xs, [3.0, 4.0])

    def test_empty_region_raises(self):
        """A region without finite points should raise InputDataError."""
        with pytest.raises(InputDataError, match="No finite data"):
            slice_region(np.arange(10.0), np.arange(10.0), (20.0, 30.0))


class TestInitialGuesses:
    """Tests for guess heuristics."""

    def test_edge_baseline_linear(self):
        """A pure line should be recovered from the edges."""
        x = np.linspace(0.0, 100.0, 200)
        coefficients = estimate_edge_baseline(x, 2.0 + 0.05 * x, 1, 50.0)
        np.testing.assert_allclose(coefficients, [4.5, 0.05], atol=1e-10)

    def test_guess_count_is_exact(self):
        """Should synthesize guesses when the detector finds too few."""
        x = np.linspace(0.0, 10.0, 100)
        guesses = initial_peak_guesses(x, np.zeros_like(x), 3, detector=lambda x, y: [])
        assert len(guesses) == 3
        centers = [guess[1] for guess in guesses]
        assert centers == sorted(centers)


class TestFitPeaks:
    """Tests for fit_peaks."""

    def test_single_lorentzian(self, lorentzian_spectrum):
        """Should recover the center and width of a single Lorentzian."""
        result = fit_peaks(lorentzian_spectrum, (1950, 2150), model="lorentzian")
        peak = result[0]
        assert peak["center"].value == pytest.approx(2060.0, abs=0.5)
        assert peak["fwhm"].value == pytest.approx(20.0, rel=0.05)
        assert peak.center.err > 0
        assert peak.center.ci[0] < peak.center.value < peak.center.ci[1]
        assert result.converged
        assert result.r_squared > 0.99
        assert result.sample_id == "cn-stretch"

    def test_noise_free_lorentzian_with_defaults(self):
        """Default settings should recover a noise-free Lorentzian almost exactly."""
        x = np.linspace(1950.0, 2150.0, 200)
        y = lorentzian([1.0, 2060.0, 20.0, 0.0], x) + 0.01
        result = fit_peaks(Spectrum(x, y))
        peak = result[0]
        assert peak["center"].value == pytest.approx(2060.0, abs=0.01)
        assert peak["fwhm"].value == pytest.approx(20.0, abs=0.1)
        assert result.r_squared > 0.999

    def test_rss_matches_prediction(self, lorentzian_spectrum):
        """The reported RSS should equal the squared residuals of predict."""
        result = fit_peaks(lorentzian_spectrum, (1950, 2150))
        rss = np.sum((result.y - accessors.predict(result, result.x)) ** 2)
        assert rss == pytest.approx(result.rss, rel=1e-9)

    def test_doublet_sorted_by_center(self, doublet_spectrum):
        """Two Gaussians should be resolved and reported in ascending center order."""
        result = fit_peaks(doublet_spectrum, model="gaussian", n_peaks=2, baseline_order=1)
        centers = [peak["center"].value for peak in result]
        assert centers == sorted(centers)
        assert centers[0] == pytest.approx(40.0, abs=0.5)
        assert centers[1] == pytest.approx(55.0, abs=0.5)
        assert result.baseline_coefficients.size == 2

    def test_explicit_p0_in_any_order(self, doublet_spectrum):
        """p0 given in descending center order should still come back sorted."""
        p0 = [0.5, 56.0, 9.0, 0.8, 39.0, 7.0]
        result = fit_peaks(doublet_spectrum, model="gaussian", p0=p0, baseline_order=1)
        assert result.n_peaks == 2
        assert result[0]["center"].value < result[1]["center"].value

    def test_empty_detector_still_yields_n_peaks(self, doublet_spectrum):
        """A detector returning nothing should not reduce the number of peaks."""
        result = fit_peaks(
            doublet_spectrum, model="gaussian", n_peaks=2, detector=lambda x, y: []
        )
        assert len(result) == 2

    def test_pseudo_voigt_reports_fraction(self, lorentzian_spectrum):
        """Pseudo-Voigt peaks carry sigma and eta within [0, 1]."""
        result = fit_peaks(lorentzian_spectrum, (1950, 2150), model="pseudo_voigt")
        peak = result[0]
        assert set(peak.keys()) == {"amplitude", "center", "sigma", "eta", "area"}
        assert 0.0 <= peak["eta"].value <= 1.0
        assert peak.fwhm_value == pytest.approx(20.0, rel=0.15)

    def test_area_matches_integral(self, lorentzian_spectrum):
        """The reported area should match the Lorentzian area formula."""
        peak = fit_peaks(lorentzian_spectrum, (1950, 2150))[0]
        expected = np.pi / 2 * peak["amplitude"].value * peak["fwhm"].value
        assert peak["area"].value == pytest.approx(expected)
        assert peak["area"].err > 0

    def test_negative_peak(self, rng):
        """A bleach should be fitted with a negative amplitude."""
        x = np.linspace(0.0, 50.0, 300)
        y = gaussian([-0.4, 25.0, 5.0, 0.0], x) + rng.normal(0.0, 0.002, x.size)
        result = fit_peaks(Spectrum(x, y), model="gaussian", baseline_order=0)
        assert result[0]["amplitude"].value == pytest.approx(-0.4, rel=0.05)

    def test_accessors(self, doublet_spectrum):
        """Prediction accessors should decompose the composite model."""
        result = fit_peaks(doublet_spectrum, model="gaussian", n_peaks=2, baseline_order=1)
        total = accessors.predict(result)
        parts = (
            accessors.predict_peak(result, 0)
            + accessors.predict_peak(result, 1)
            + accessors.predict_baseline(result)
        )
        np.testing.assert_allclose(total, parts)
        np.testing.assert_allclose(accessors.residuals(result), result.y - total)
        assert accessors.predict(result, doublet_spectrum).shape == doublet_spectrum.x.shape
        with pytest.raises(UsageError, match="out of range"):
            result.predict_peak(2)

    def test_summary_rows(self, lorentzian_spectrum):
        """Summary rows should label peak and baseline parameters."""
        result = fit_peaks(lorentzian_spectrum, (1950, 2150), baseline_order=1)
        labels = [label for label, _ in result.summary_rows()]
        assert "Peak 1 center" in labels
        assert "Baseline c1" in labels
        assert result.summary_info()["Region"] == "1950 – 2150"

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"model": "voigtian"}, "Unknown peak model"),
            ({"baseline_order": -1}, "baseline_order"),
            ({"n_peaks": 0}, "n_peaks"),
            ({"p0": [1.0, 2060.0]}, "not a multiple"),
            ({"p0": [1.0, 2060.0, 20.0], "n_peaks": 2}, "n_peaks=2"),
        ],
    )
    def test_usage_errors(self, lorentzian_spectrum, kwargs, match):
        """Inconsistent arguments should raise UsageError."""
        with pytest.raises(UsageError, match=match):
            fit_peaks(lorentzian_spectrum, **kwargs)

    def test_matrix_rejected(self):
        """A 2-D matrix should raise UsageError."""
        matrix = SignalMatrix(np.arange(3.0), np.arange(4.0), np.zeros((3, 4)))
        with pytest.raises(UsageError, match="1-D signal"):
            fit_peaks(matrix)

    def test_empty_region(self, lorentzian_spectrum):
        """A region outside the data should raise InputDataError."""
        with pytest.raises(InputDataError):
            fit_peaks(lorentzian_spectrum, (0.0, 10.0))


class TestTASpectrum:
    """Tests for the ESA/GSB spectrum fit."""

    def test_anharmonicity(self, rng):
        """ESA should sit below the GSB by the anharmonicity."""
        x = np.linspace(2000.0, 2120.0, 300)
        y = gaussian([0.3, 2040.0, 15.0, 0.0], x) + gaussian([-0.5, 2065.0, 12.0, 0.0], x)
        y = y + rng.normal(0.0, 0.002, x.size)
        fit = fit_ta_spectrum(Spectrum(x, y))
        assert fit.esa["amplitude"].value > 0
        assert fit.gsb["amplitude"].value < 0
        assert fit.anharmonicity.value == pytest.approx(25.0, abs=0.5)
        assert fit.anharmonicity.err > 0
        assert fit.r_squared > 0.99
