"""End-to-end fitting scenarios on synthetic spectroscopy data."""

import warnings

import pytest

import numpy as np

import specfit
from specfit import KineticTrace, SignalMatrix, Spectrum
from specfit.core.lineshapes.functions import gaussian, irf_exp_decay, lorentzian


class TestFtirScenario:
    """Baseline correction followed by peak decomposition of an FTIR band."""

    def test_baseline_then_peak(self, rng):
        """A Lorentzian on a curved baseline should survive correction and fitting."""
        x = np.linspace(1900.0, 2200.0, 600)
        background = 0.3 + 1e-3 * (x - 1900.0) + 2e-6 * (x - 1900.0) ** 2
        y = background + lorentzian([1.0, 2060.0, 20.0, 0.0], x)
        y = y + rng.normal(0.0, 0.002, x.size)

        corrected, _ = specfit.correct_signal_baseline(
            Spectrum(x, y), method="arpls", lam=1e6
        )
        result = specfit.fit_peaks(corrected, (1950.0, 2150.0), model="lorentzian")
        peak = result[0]
        assert peak["center"].value == pytest.approx(2060.0, abs=0.5)
        assert peak["fwhm"].value == pytest.approx(20.0, rel=0.1)

    def test_true_lineshape_fits_best(self, lorentzian_spectrum):
        """The true lineshape should leave the smaller residual."""
        gauss = specfit.fit_peaks(lorentzian_spectrum, (1950, 2150), model="gaussian")
        lorentz = specfit.fit_peaks(lorentzian_spectrum, (1950, 2150), model="lorentzian")
        assert lorentz.rss < gauss.rss
        assert lorentz.r_squared > gauss.r_squared


class TestTransientAbsorptionScenario:
    """A broadband transient absorption map analysed by slices."""

    @pytest.fixture
    def ta_map(self, rng):
        time = np.linspace(-2.0, 40.0, 300)
        wavenumber = np.linspace(2000.0, 2120.0, 120)
        esa = gaussian([0.3, 2040.0, 15.0, 0.0], wavenumber)
        gsb = gaussian([-0.5, 2065.0, 12.0, 0.0], wavenumber)
        kinetics = irf_exp_decay([1.0, 8.0, 0.0, 0.2, 0.0], time)
        data = np.outer(kinetics, esa + gsb)
        data = data + rng.normal(0.0, 0.002, data.shape)
        return SignalMatrix(time, wavenumber, data, {"sample_id": "ta-map"})

    def test_spectrum_slice(self, ta_map):
        """An early-time spectrum should give the anharmonic shift."""
        spectrum = ta_map.spectrum_at(1.0)
        fit = specfit.fit_ta_spectrum(spectrum)
        assert fit.anharmonicity.value == pytest.approx(25.0, abs=1.0)

    def test_global_kinetics_from_slices(self, ta_map):
        """ESA and GSB kinetics should share one lifetime with opposite signs."""
        traces = [ta_map.trace_at(2040.0), ta_map.trace_at(2065.0)]
        result = specfit.fit_global(traces, labels=["ESA", "GSB"])
        assert result.taus[0] == pytest.approx(8.0, rel=0.02)
        assert result.amplitudes[0, 0] > 0
        assert result.amplitudes[1, 0] < 0
        assert "## Global Fit" in specfit.format_results(result)

    def test_matrix_needs_slicing(self, ta_map):
        """Fitting the whole matrix should be refused."""
        with pytest.raises(specfit.UsageError):
            specfit.fit_exp_decay(ta_map)


class TestKineticsScenario:
    """Single-trace kinetics with and without the instrument response."""

    def test_biexponential(self, biexp_trace):
        """Two components should beat one on the same trace."""
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", specfit.ConvergenceWarning)
            single = specfit.fit_exp_decay(biexp_trace, n_exp=1)
        double = specfit.fit_exp_decay(biexp_trace, n_exp=2)
        assert double.rss < 0.5 * single.rss
        np.testing.assert_allclose(double.taus, [1.5, 15.0], rtol=0.05)

    def test_no_irf_recovers_step_decay(self, rng):
        """Without IRF and with a pinned t0 the step model should be recovered."""
        t = np.linspace(0.0, 20.0, 300)
        s = 0.8 * np.exp(-t / 3.0) + rng.normal(0.0, 0.002, t.size)
        fit = specfit.fit_exp_decay(KineticTrace(t, s), irf=False, t_start=0.0)
        assert fit.tau == pytest.approx(3.0, rel=0.02)
        assert fit.t0 == 0.0
        assert fit.offset == pytest.approx(0.0, abs=0.005)
