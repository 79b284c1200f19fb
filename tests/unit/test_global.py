"""Test global kinetic fitting."""

import pytest

import numpy as np

from specfit.core.domain.signals import KineticTrace, SignalMatrix
from specfit.core.fitting import accessors
from specfit.core.fitting.global_fit import fit_global, global_tau_order
from specfit.core.lineshapes.composite import GlobalDecayModel
from specfit.core.lineshapes.functions import irf_exp_decay
from specfit.core.shared.exceptions import UsageError


class TestGlobalTauOrder:
    """Tests for the global permutation."""

    def test_moves_every_trace_amplitude(self):
        """Sorting shared taus should permute each trace's amplitudes alike."""
        model = GlobalDecayModel(2, irf=False, sizes=(5, 5))
        params = np.array([10.0, 1.0, 0.0, 0.1, 0.2, 0.0, 0.3, 0.4, 0.0])
        order = global_tau_order(params, model)
        np.testing.assert_array_equal(
            params[order], [1.0, 10.0, 0.0, 0.2, 0.1, 0.0, 0.4, 0.3, 0.0]
        )


class TestFitGlobal:
    """Tests for fit_global."""

    def test_shared_tau_and_signs(self, global_traces):
        """Shared tau should be recovered with per-trace amplitude signs."""
        result = fit_global(global_traces, labels=["ESA", "GSB"], n_exp=1)
        assert result.taus[0] == pytest.approx(5.0, rel=0.02)
        assert result.amplitudes.shape == (2, 1)
        assert result.amplitudes[0, 0] > 0
        assert result.amplitudes[1, 0] < 0
        assert result.labels == ("ESA", "GSB")
        assert result.converged
        assert np.all(result.trace_r_squared > 0.99)

    def test_predictions_per_trace(self, global_traces):
        """Predictions and residuals should come back on each trace's own axis."""
        result = fit_global(global_traces)
        predictions = accessors.predict(result)
        assert [p.shape for p in predictions] == [t.time.shape for t in global_traces]
        residuals = accessors.residuals(result, global_traces)
        assert len(residuals) == 2
        assert np.std(residuals[0]) < 0.005

    def test_rss_matches_prediction(self, global_traces):
        """The reported RSS should sum the squared residuals of every trace."""
        result = fit_global(global_traces)
        predictions = accessors.predict(result, global_traces)
        rss = sum(
            np.sum((trace.signal - prediction) ** 2)
            for trace, prediction in zip(global_traces, predictions, strict=True)
        )
        assert rss == pytest.approx(result.rss, rel=1e-9)

    def test_traces_on_different_axes(self, rng):
        """Traces may have different lengths and sampling."""
        axes = (np.linspace(-2.0, 20.0, 300), np.linspace(-1.0, 25.0, 180))
        traces = []
        for t, amplitude in zip(axes, (0.5, 0.2), strict=True):
            s = irf_exp_decay([amplitude, 3.0, 0.0, 0.2, 0.0], t)
            traces.append(KineticTrace(t, s + rng.normal(0.0, 0.001, t.size)))
        result = fit_global(traces)
        assert result.taus[0] == pytest.approx(3.0, rel=0.03)
        assert result.labels == ("trace 1", "trace 2")

    def test_named_parameters(self, global_traces):
        """Estimates should use shared and per-trace names."""
        result = fit_global(global_traces)
        assert "tau_1" in result.params
        assert "trace2_amplitude_1" in result.params
        labels = [label for label, _ in result.shared_rows()]
        assert labels == ["τ", "t0", "σ (IRF)"]

    def test_empty_list_raises(self):
        """An empty trace list should raise UsageError."""
        with pytest.raises(UsageError, match="at least one trace"):
            fit_global([])

    def test_label_mismatch_raises(self, global_traces):
        """The number of labels must match the number of traces."""
        with pytest.raises(UsageError, match="labels"):
            fit_global(global_traces, labels=["only one"])

    def test_matrix_rejected(self, global_traces):
        """Matrices inside the list should raise UsageError."""
        matrix = SignalMatrix(np.arange(3.0), np.arange(4.0), np.zeros((3, 4)))
        with pytest.raises(UsageError, match="1-D signal"):
            fit_global([global_traces[0], matrix])

    def test_predict_with_wrong_trace_count(self, global_traces):
        """Predicting on a different number of traces should raise."""
        result = fit_global(global_traces)
        with pytest.raises(UsageError, match="Expected 2 traces"):
            result.predict(global_traces[:1])
