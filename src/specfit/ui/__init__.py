"""Console output: theme, logging, tables and fit reports."""

from specfit.ui.console import console
from specfit.ui.logging import close_logging, log, log_dict, log_section, setup_logging
from specfit.ui.report import report
from specfit.ui.tables import create_table, print_peak_table, print_summary

__all__ = [
    "close_logging",
    "console",
    "create_table",
    "log",
    "log_dict",
    "log_section",
    "print_peak_table",
    "print_summary",
    "report",
    "setup_logging",
]
