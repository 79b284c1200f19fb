"""Logging configuration for the specfit UI.

Core modules log through ``logging.getLogger(__name__)``; this module
attaches handlers to the ``"specfit"`` parent logger so those messages land
in the session log file and, in verbose mode, on the console.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Literal

from rich.logging import RichHandler

from specfit import __version__
from specfit.ui.console import console

# Module-level logger (configured by setup_logging)
_logger: logging.Logger | None = None


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def setup_logging(
    log_file: Path | None = None,
    verbose: bool = False,
    level: int = logging.INFO,
    fmt: Literal["text", "json"] | None = None,
) -> None:
    """Configure logging for specfit.

    Args:
        log_file: Session log file; logging stays disabled when None and
            ``verbose`` is False
        verbose: Also log to the console through a RichHandler
        level: Logging level for every handler
        fmt: File format; inferred from a ``.json`` suffix when None
    """
    global _logger

    if log_file is None and not verbose:
        _logger = None
        return

    _logger = logging.getLogger("specfit")
    _logger.setLevel(level)
    _logger.handlers.clear()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)

        use_json = fmt == "json" or (fmt is None and log_file.suffix == ".json")
        if use_json:
            file_formatter: logging.Formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                "%(asctime)s | %(levelname)-5s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        file_handler.setFormatter(file_formatter)
        _logger.addHandler(file_handler)

    if verbose:
        console_handler = RichHandler(
            console=console,
            show_time=False,
            show_path=False,
            markup=False,
        )
        console_handler.setLevel(level)
        _logger.addHandler(console_handler)

    _logger.info("━" * 60)
    _logger.info("specfit v%s - Session Started", __version__)
    _logger.info("━" * 60)
    _logger.info("Command: %s", " ".join(sys.argv))
    _logger.info("Working directory: %s", Path.cwd())
    _logger.info("Python: %s | Platform: %s", sys.version.split()[0], sys.platform)


def log(message: str, level: str = "info") -> None:
    """Log a message (no-op unless logging is enabled)."""
    if _logger is None:
        return

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    _logger.log(level_map.get(level.lower(), logging.INFO), message)


def log_section(title: str) -> None:
    """Log a section header."""
    if _logger is None:
        return

    _logger.info("")
    _logger.info("=== %s ===", title.upper())


def log_dict(data: dict[str, object], indent: str = "  ") -> None:
    """Log a dictionary as key-value pairs."""
    if _logger is None:
        return

    for key, value in data.items():
        _logger.info("%s- %s: %s", indent, key, value)


def close_logging() -> None:
    """Close logging and finalize the log file."""
    global _logger

    if _logger is None:
        return

    _logger.info("")
    _logger.info("━" * 60)
    _logger.info("specfit Session Completed")
    _logger.info("━" * 60)

    for handler in _logger.handlers[:]:
        handler.close()
        _logger.removeHandler(handler)
    _logger = None


__all__ = [
    "JSONFormatter",
    "close_logging",
    "log",
    "log_dict",
    "log_section",
    "setup_logging",
]
