"""Test Markdown result formatting."""

import pytest

import numpy as np

from specfit.core.fitting.decay import fit_exp_decay
from specfit.core.fitting.global_fit import fit_global
from specfit.core.fitting.peaks import fit_peaks
from specfit.core.results.estimates import ParameterEstimate
from specfit.io.markdown import format_float, format_results, parameter_table, write_markdown


class TestFormatFloat:
    """Tests for format_float."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0.0, "0.0000"),
            (2060.1234, "2060.1234"),
            (1.5e-7, "1.5000e-07"),
            (np.nan, "nan"),
        ],
    )
    def test_formats(self, value, expected):
        """Should switch to scientific notation for extreme magnitudes."""
        assert format_float(value, 4) == expected


class TestParameterTable:
    """Tests for the Markdown table."""

    def test_fixed_and_missing_errors(self):
        """Fixed parameters and missing errors should be marked."""
        rows = [
            ("t0", ParameterEstimate("t0", 0.0, 0.0, is_fixed=True)),
            ("tau", ParameterEstimate("tau", 1.0, np.nan)),
            ("A", ParameterEstimate("A", 0.5, 0.01)),
        ]
        table = parameter_table(rows, precision=2)
        lines = table.splitlines()
        assert lines[0] == "| Parameter | Value | Error |"
        assert lines[2] == "| t0 | 0.00 | fixed |"
        assert lines[3] == "| tau | 1.00 | n/a |"
        assert lines[4] == "| A | 0.50 | 0.01 |"


class TestFormatResults:
    """Tests for format_results on every result type."""

    def test_peak_fit(self, lorentzian_spectrum):
        """Peak fits should render a Peak Fit section with R²."""
        result = fit_peaks(lorentzian_spectrum, (1950, 2150))
        text = format_results(result)
        assert text.startswith("## Peak Fit")
        assert "| Parameter |" in text
        assert "Peak 1 center" in text
        assert "R²" in text

    def test_single_peak(self, lorentzian_spectrum):
        """A single peak record should also format as a Peak Fit."""
        peak = fit_peaks(lorentzian_spectrum, (1950, 2150))[0]
        text = format_results(peak)
        assert text.startswith("## Peak Fit")
        assert "Peak 1 area" in text

    def test_exp_decay(self, biexp_trace):
        """Single-component decays should render an Exponential Decay section."""
        text = format_results(fit_exp_decay(biexp_trace, n_exp=1))
        assert text.startswith("## Exponential Decay")
        assert "τ" in text
        assert "R²" in text

    def test_multiexp_decay(self, biexp_trace):
        """Multi-component decays should list every component."""
        text = format_results(fit_exp_decay(biexp_trace, n_exp=2))
        assert "## Multi-exponential Decay" in text
        assert "| τ 2 |" in text
        assert "Weights" in text

    def test_global_fit(self, global_traces):
        """Global fits should render shared and per-trace sections."""
        text = format_results(fit_global(global_traces, labels=["ESA", "GSB"]))
        assert text.startswith("## Global Fit")
        assert "Shared" in text
        assert "### ESA" in text
        assert "### GSB" in text
        assert "R²" in text

    def test_write_markdown(self, lorentzian_spectrum, tmp_path):
        """Should write the report, creating parent directories."""
        path = tmp_path / "reports" / "fit.md"
        write_markdown(fit_peaks(lorentzian_spectrum, (1950, 2150)), path)
        assert path.read_text(encoding="utf-8").startswith("## Peak Fit")
