"""Test signal containers and peak detection."""

import pytest

import numpy as np

from specfit.core.domain.peaks import PeakCandidate, find_peaks, most_prominent
from specfit.core.domain.signals import (
    KineticTrace,
    SignalKind,
    SignalMatrix,
    Spectrum,
    require_1d,
    signal_axis,
)
from specfit.core.shared.exceptions import UsageError


class TestContainers:
    """Tests for Spectrum, KineticTrace and SignalMatrix."""

    def test_spectrum_accessors(self):
        """Generic accessors should map to x and y."""
        spectrum = Spectrum([1.0, 2.0, 3.0], [0.1, 0.2, 0.3], {"sample_id": "abc"})
        assert spectrum.kind is SignalKind.SPECTRUM
        assert not spectrum.is_matrix
        assert spectrum.sample_id == "abc"
        assert len(spectrum) == 3
        np.testing.assert_array_equal(spectrum.xdata(), [1.0, 2.0, 3.0])

    def test_arrays_are_read_only_copies(self):
        """Containers should copy input and refuse mutation."""
        y = np.array([1.0, 2.0])
        trace = KineticTrace([0.0, 1.0], y)
        y[0] = 99.0
        assert trace.signal[0] == 1.0
        with pytest.raises(ValueError):
            trace.signal[0] = 5.0

    def test_length_mismatch_raises(self):
        """x and y must have equal lengths."""
        with pytest.raises(UsageError, match="equal lengths"):
            Spectrum([1.0, 2.0], [1.0])

    def test_wrong_dimension_raises(self):
        """1-D containers reject 2-D input."""
        with pytest.raises(UsageError, match="1-dimensional"):
            KineticTrace(np.zeros((2, 2)), np.zeros((2, 2)))

    def test_missing_sample_id(self):
        """sample_id should default to an empty string."""
        assert KineticTrace([0.0], [1.0]).sample_id == ""

    def test_matrix_shape_checked(self):
        """Matrix data must be time x wavelength."""
        with pytest.raises(UsageError, match="shape"):
            SignalMatrix(np.arange(3.0), np.arange(4.0), np.zeros((4, 3)))

    def test_matrix_slices(self):
        """trace_at and spectrum_at should pick the nearest column or row."""
        time = np.array([0.0, 1.0, 2.0])
        wavelength = np.array([400.0, 500.0])
        data = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
        matrix = SignalMatrix(time, wavelength, data, {"sample_id": "map"})
        assert matrix.kind is SignalKind.MATRIX
        assert matrix.shape == (3, 2)

        trace = matrix.trace_at(490.0)
        np.testing.assert_array_equal(trace.signal, [2.0, 4.0, 6.0])
        assert trace.metadata["wavelength"] == 500.0
        assert trace.sample_id == "map"

        spectrum = matrix.spectrum_at(1.2)
        np.testing.assert_array_equal(spectrum.y, [3.0, 4.0])

    def test_require_1d(self):
        """Only matrices should be rejected."""
        require_1d(Spectrum([0.0], [0.0]), "fit_peaks")
        matrix = SignalMatrix(np.arange(2.0), np.arange(2.0), np.zeros((2, 2)))
        with pytest.raises(UsageError, match="fit_peaks needs a 1-D signal"):
            require_1d(matrix, "fit_peaks")

    def test_signal_axis_follows_kind(self):
        """The axis should be chosen from the kind tag."""
        spectrum = Spectrum([1.0, 2.0], [0.0, 0.0])
        trace = KineticTrace([-1.0, 0.0, 1.0], [0.0, 1.0, 0.5])
        np.testing.assert_array_equal(signal_axis(spectrum), [1.0, 2.0])
        np.testing.assert_array_equal(signal_axis(trace), [-1.0, 0.0, 1.0])
        matrix = SignalMatrix(np.arange(2.0), np.arange(3.0), np.zeros((2, 3)))
        with pytest.raises(UsageError, match="1-D signal"):
            signal_axis(matrix)

    def test_resolve_axis(self):
        """Prediction axes may be None, a container or a plain array."""
        from specfit.core.results.peak_results import resolve_axis

        default = np.array([0.0, 1.0])
        assert resolve_axis(None, default) is default
        trace = KineticTrace([2.0, 3.0, 4.0], [0.0, 1.0, 0.5])
        np.testing.assert_array_equal(resolve_axis(trace, default), [2.0, 3.0, 4.0])
        np.testing.assert_array_equal(resolve_axis([5, 6], default), [5.0, 6.0])
        matrix = SignalMatrix(np.arange(2.0), np.arange(3.0), np.zeros((2, 3)))
        with pytest.raises(UsageError):
            resolve_axis(matrix, default)


class TestFindPeaks:
    """Tests for the default peak detector."""

    def test_detects_peak_and_dip(self):
        """Both positive peaks and dips should be found by default."""
        x = np.linspace(0.0, 100.0, 1001)
        y = np.exp(-0.5 * ((x - 30.0) / 3.0) ** 2) - 0.6 * np.exp(-0.5 * ((x - 70.0) / 3.0) ** 2)
        candidates = find_peaks(x, y)
        assert [round(c.position) for c in candidates] == [30, 70]
        assert candidates[0].intensity > 0
        assert candidates[1].intensity < 0
        # FWHM of a Gaussian is 2.3548 sigma
        assert candidates[0].width == pytest.approx(2.3548 * 3.0, rel=0.05)

    def test_positive_only(self):
        """negative=False should skip dips."""
        x = np.linspace(0.0, 100.0, 1001)
        y = -np.exp(-0.5 * ((x - 70.0) / 3.0) ** 2)
        assert find_peaks(x, y, negative=False) == []

    def test_flat_signal(self):
        """A flat signal has no peaks."""
        assert find_peaks(np.arange(10.0), np.ones(10)) == []

    def test_min_distance_merges(self):
        """Close peaks should be thinned by min_distance."""
        x = np.linspace(0.0, 10.0, 1001)
        y = np.exp(-0.5 * ((x - 4.8) / 0.1) ** 2) + 0.9 * np.exp(-0.5 * ((x - 5.2) / 0.1) ** 2)
        assert len(find_peaks(x, y, negative=False)) == 2
        assert len(find_peaks(x, y, negative=False, min_distance=1.0)) == 1

    def test_most_prominent(self):
        """Should keep the n most prominent, sorted by position."""
        candidates = [
            PeakCandidate(10.0, 1.0, 1.0, 1.0, (9.0, 11.0)),
            PeakCandidate(5.0, 3.0, 3.0, 1.0, (4.0, 6.0)),
            PeakCandidate(1.0, 2.0, 2.0, 1.0, (0.0, 2.0)),
        ]
        assert [c.position for c in most_prominent(candidates, 2)] == [1.0, 5.0]
