"""Console configuration and theme for the specfit UI.

This module provides the central console instance and theme used throughout
the command-line interface for consistent styling.
"""

import os
import sys

from rich.console import Console
from rich.theme import Theme

# Palette chosen for good contrast in light/dark terminals
SPECFIT_THEME = Theme(
    {
        # --- Semantic Status ---
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "info": "cyan",
        "neutral": "dim white",
        # --- UI Structure ---
        "header": "bold cyan",
        "subheader": "bold white",
        # --- Data & Values ---
        "key": "cyan",
        "value": "green",
        "metric": "bold green",
        "number": "green",
        "path": "blue underline",
        "param": "cyan",
        # --- Modifiers ---
        "dim": "dim",
        "emphasis": "bold",
    }
)

# Single console instance for entire application
console = Console(theme=SPECFIT_THEME)

_EMOJI_DISABLED = os.getenv("SPECFIT_NO_EMOJI", "").lower() in {"1", "true", "yes"}


def _supports_emoji() -> bool:
    """Best-effort detection if the terminal supports Unicode symbols."""
    if _EMOJI_DISABLED:
        return False
    enc = getattr(console, "encoding", None) or sys.getdefaultencoding()
    return enc is None or "utf" in enc.lower()


def icon(name: str) -> str:
    """Return a UI icon string based on terminal capabilities.

    Names: check, warn, error, info, bullet
    """
    use_emoji = _supports_emoji()
    mapping = {
        "check": "✓" if use_emoji else "+",
        "warn": "⚠" if use_emoji else "!",
        "error": "✗" if use_emoji else "x",
        "info": "▸" if use_emoji else ">",
        "bullet": "‣" if use_emoji else "-",
    }
    return mapping.get(name, mapping["bullet"])


__all__ = ["SPECFIT_THEME", "console", "icon"]
