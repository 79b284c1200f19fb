"""UI messages and status indicators."""

from __future__ import annotations

from specfit.ui.console import console, icon
from specfit.ui.logging import log

__all__ = [
    "error",
    "info",
    "success",
    "warning",
]


def success(message: str) -> None:
    """Print and log a success message."""
    console.print(f"[success]{icon('check')}[/success] {message}")
    log(message)


def info(message: str) -> None:
    """Print and log an informational message."""
    console.print(f"[info]{icon('info')}[/info] {message}")
    log(message)


def warning(message: str) -> None:
    """Print and log a warning."""
    console.print(f"[warning]{icon('warn')} {message}[/warning]")
    log(message, level="warning")


def error(message: str) -> None:
    """Print and log an error."""
    console.print(f"[error]{icon('error')} {message}[/error]")
    log(message, level="error")
