"""Integration tests for CLI commands."""

import json

import pytest
from typer.testing import CliRunner

import numpy as np

from specfit.core.lineshapes.functions import exp_decay, irf_exp_decay, lorentzian


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def app():
    """Import the CLI app."""
    from specfit.cli.app import app

    return app


@pytest.fixture
def spectrum_file(tmp_path, rng):
    """Lorentzian on a flat baseline, saved as two columns."""
    x = np.linspace(1950.0, 2150.0, 200)
    y = lorentzian([1.0, 2060.0, 20.0, 0.01], x) + rng.normal(0.0, 0.002, x.size)
    path = tmp_path / "cn_stretch.dat"
    np.savetxt(path, np.column_stack((x, y)), header="wavenumber absorbance")
    return path


@pytest.fixture
def trace_file(tmp_path, rng):
    """Single-exponential IRF trace, tau=5."""
    t = np.linspace(-2.0, 30.0, 300)
    s = irf_exp_decay([0.4, 5.0, 0.0, 0.2, 0.0], t) + rng.normal(0.0, 0.002, t.size)
    path = tmp_path / "trace.csv"
    np.savetxt(path, np.column_stack((t, s)), delimiter=",", header="time,signal")
    return path


class TestGeneralCommands:
    """Tests for help, version, info and init."""

    def test_no_args_shows_help(self, runner, app):
        """CLI with no args should show help."""
        result = runner.invoke(app, [])
        assert result.exit_code in [0, 2]
        assert "Usage" in result.output

    def test_version_flag(self, runner, app):
        """--version should show the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "specfit" in result.output

    def test_help_lists_commands(self, runner, app):
        """--help should list every command."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("baseline", "peaks", "decay", "global", "init", "info"):
            assert command in result.output

    def test_info_command(self, runner, app):
        """info should list models and baseline methods."""
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "pseudo_voigt" in result.output
        assert "arpls" in result.output

    def test_init_creates_config(self, runner, app, tmp_path):
        """init should write a loadable configuration."""
        from specfit.io.config import load_config

        path = tmp_path / "specfit.toml"
        result = runner.invoke(app, ["init", str(path)])
        assert result.exit_code == 0
        assert load_config(path).peaks.model == "lorentzian"

    def test_init_refuses_overwrite(self, runner, app, tmp_path):
        """init should not overwrite without --force."""
        path = tmp_path / "specfit.toml"
        path.write_text("# keep me\n")
        result = runner.invoke(app, ["init", str(path)])
        assert result.exit_code == 1
        assert path.read_text() == "# keep me\n"

        result = runner.invoke(app, ["init", str(path), "--force"])
        assert result.exit_code == 0
        assert "[solver]" in path.read_text()


class TestPeaksCommand:
    """Tests for the peaks command."""

    def test_fit_with_markdown(self, runner, app, spectrum_file, tmp_path):
        """Should fit the peak and write a Markdown summary."""
        markdown = tmp_path / "fit.md"
        result = runner.invoke(
            app,
            ["peaks", str(spectrum_file), "--region", "1950", "2150", "-m", str(markdown)],
        )
        assert result.exit_code == 0, result.output
        text = markdown.read_text(encoding="utf-8")
        assert text.startswith("## Peak Fit")
        assert "Peak 1 center" in text

    def test_detect_prints_candidates(self, runner, app, spectrum_file):
        """--detect should print the candidate table."""
        result = runner.invoke(app, ["peaks", str(spectrum_file), "--detect"])
        assert result.exit_code == 0, result.output
        assert "Detected Peaks" in result.output

    def test_unknown_model_fails(self, runner, app, spectrum_file):
        """An unknown model should exit with an error."""
        result = runner.invoke(app, ["peaks", str(spectrum_file), "--model", "voigtian"])
        assert result.exit_code == 1
        assert "Unknown peak model" in result.output

    def test_config_file_is_used(self, runner, app, spectrum_file, sample_config_file, tmp_path):
        """Options from --config should apply when not given on the command line."""
        markdown = tmp_path / "fit.md"
        result = runner.invoke(
            app,
            ["peaks", str(spectrum_file), "-c", str(sample_config_file), "-m", str(markdown)],
        )
        assert result.exit_code == 0, result.output
        text = markdown.read_text(encoding="utf-8")
        assert "Peak 2 center" in text
        assert "gaussian" in text

    def test_invalid_config_fails(self, runner, app, spectrum_file, tmp_path):
        """An invalid configuration should exit with an error."""
        config = tmp_path / "bad.toml"
        config.write_text("[peaks]\nmodel = 'voigtian'\n")
        result = runner.invoke(app, ["peaks", str(spectrum_file), "-c", str(config)])
        assert result.exit_code == 1

    def test_missing_file_fails(self, runner, app, tmp_path):
        """A missing data file should be rejected by argument validation."""
        result = runner.invoke(app, ["peaks", str(tmp_path / "missing.dat")])
        assert result.exit_code == 2


class TestBaselineCommand:
    """Tests for the baseline command."""

    def test_writes_corrected_columns(self, runner, app, spectrum_file, tmp_path):
        """Should write x, corrected signal and baseline."""
        output = tmp_path / "corrected.txt"
        args = ["baseline", str(spectrum_file), "--method", "snip", "--iterations", "30"]
        result = runner.invoke(app, [*args, "-o", str(output)])
        assert result.exit_code == 0, result.output
        data = np.loadtxt(output)
        assert data.shape == (200, 3)
        np.testing.assert_allclose(data[:, 1] + data[:, 2], np.loadtxt(spectrum_file)[:, 1])

    def test_invalid_method_fails(self, runner, app, spectrum_file):
        """An unknown method should fail validation."""
        result = runner.invoke(app, ["baseline", str(spectrum_file), "--method", "rubberband"])
        assert result.exit_code == 1


class TestDecayCommands:
    """Tests for the decay and global commands."""

    def test_decay_with_json_log(self, runner, app, trace_file, tmp_path):
        """Should fit the trace and write a JSON session log."""
        log_file = tmp_path / "session.json"
        markdown = tmp_path / "decay.md"
        result = runner.invoke(
            app,
            ["decay", str(trace_file), "-m", str(markdown), "--log-file", str(log_file)],
        )
        assert result.exit_code == 0, result.output
        assert markdown.read_text(encoding="utf-8").startswith("## Exponential Decay")
        records = [json.loads(line) for line in log_file.read_text().splitlines() if line]
        assert records
        assert all("message" in record for record in records)

    def test_decay_without_irf(self, runner, app, tmp_path):
        """--no-irf with --t-start should pin time zero."""
        t = np.linspace(0.0, 30.0, 300)
        path = tmp_path / "step.dat"
        np.savetxt(path, np.column_stack((t, exp_decay([0.5, 4.0, 1.0, 0.0], t))))
        markdown = tmp_path / "decay.md"
        result = runner.invoke(
            app,
            ["decay", str(path), "--no-irf", "--t-start", "1.0", "-m", str(markdown)],
        )
        assert result.exit_code == 0, result.output
        assert "| t0 | 1.0000 | fixed |" in markdown.read_text(encoding="utf-8")

    def test_t_start_with_irf_fails(self, runner, app, trace_file):
        """--t-start together with the IRF model should exit with an error."""
        result = runner.invoke(app, ["decay", str(trace_file), "--t-start", "0.0"])
        assert result.exit_code == 1

    def test_global(self, runner, app, trace_file, tmp_path, rng):
        """Should fit two traces with labels and write per-trace sections."""
        t = np.linspace(-2.0, 30.0, 300)
        s = irf_exp_decay([-0.3, 5.0, 0.0, 0.2, 0.0], t) + rng.normal(0.0, 0.002, t.size)
        second = tmp_path / "gsb.dat"
        np.savetxt(second, np.column_stack((t, s)))
        markdown = tmp_path / "global.md"
        result = runner.invoke(
            app,
            [
                "global", str(trace_file), str(second),
                "-l", "ESA", "-l", "GSB", "-m", str(markdown),
            ],
        )
        assert result.exit_code == 0, result.output
        text = markdown.read_text(encoding="utf-8")
        assert text.startswith("## Global Fit")
        assert "### ESA" in text
        assert "### GSB" in text
