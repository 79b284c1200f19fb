"""Tests for console output and session logging."""

import json
import logging

import numpy as np

from specfit.core.results.estimates import ParameterEstimate


class TestMessages:
    """Tests for status messages."""

    def test_messages_print(self):
        """Messages should reach the console."""
        from specfit.ui.console import console
        from specfit.ui.messages import error, info, success, warning

        with console.capture() as capture:
            success("fit done")
            info("loading")
            warning("boundary")
            error("failed")
        output = capture.get()
        for text in ("fit done", "loading", "boundary", "failed"):
            assert text in output

    def test_icon_fallback(self):
        """Unknown icon names should fall back to the bullet."""
        from specfit.ui.console import icon

        assert icon("nonexistent") == icon("bullet")


class TestTables:
    """Tests for rich tables."""

    def test_parameter_table_marks_fixed_and_boundary(self):
        """Fixed, missing and boundary estimates should be flagged."""
        from specfit.ui.console import console
        from specfit.ui.tables import parameter_table

        rows = [
            ("t0", ParameterEstimate("t0", 0.0, 0.0, (0.0, 0.0), is_fixed=True)),
            ("eta", ParameterEstimate("eta", 1.0, 0.1, (0.8, 1.2), min_bound=0.0, max_bound=1.0)),
            ("tau", ParameterEstimate("tau", 2.0, np.nan)),
        ]
        with console.capture() as capture:
            console.print(parameter_table(rows, title="Parameters"))
        output = capture.get()
        assert "fixed" in output
        assert "n/a" in output
        assert "⚠" in output

    def test_report_lorentzian(self, lorentzian_spectrum):
        """report should print the parameters and statistics."""
        from specfit.core.fitting.peaks import fit_peaks
        from specfit.ui.console import console
        from specfit.ui.report import report

        result = fit_peaks(lorentzian_spectrum, (1950, 2150))
        with console.capture() as capture:
            report(result)
        output = capture.get()
        assert "Peak 1 center" in output
        assert "Fit Statistics" in output


class TestLogging:
    """Tests for session logging."""

    def test_disabled_without_file(self):
        """Without a file and without verbose, logging is a no-op."""
        from specfit.ui import logging as ui_logging

        ui_logging.setup_logging(None)
        ui_logging.log("ignored")
        assert ui_logging._logger is None

    def test_text_log_file(self, tmp_path):
        """Text logs should contain the session header and messages."""
        from specfit.ui.logging import close_logging, log, log_dict, setup_logging

        path = tmp_path / "session.log"
        setup_logging(path)
        log("fitting peaks")
        log_dict({"model": "lorentzian"})
        logging.getLogger("specfit.core.fitting.peaks").info("from the core")
        close_logging()

        text = path.read_text(encoding="utf-8")
        assert "Session Started" in text
        assert "fitting peaks" in text
        assert "model: lorentzian" in text
        assert "from the core" in text
        assert "Session Completed" in text

    def test_json_log_file(self, tmp_path):
        """A .json suffix should select the JSON formatter."""
        from specfit.ui.logging import close_logging, log, setup_logging

        path = tmp_path / "session.json"
        setup_logging(path)
        log("bad region", level="warning")
        close_logging()

        records = [json.loads(line) for line in path.read_text().splitlines()]
        warnings = [r for r in records if r["level"] == "WARNING"]
        assert warnings[0]["message"] == "bad region"
