"""I/O module for specfit.

Handles file operations including:
- Configuration file loading/saving (TOML)
- Numeric column loading
- Markdown result summaries
"""

from specfit.io.config import generate_default_config, load_config, save_config
from specfit.io.data import load_columns, load_spectrum, load_trace
from specfit.io.markdown import format_results, write_markdown

__all__ = [
    "format_results",
    "generate_default_config",
    "load_columns",
    "load_config",
    "load_spectrum",
    "load_trace",
    "save_config",
    "write_markdown",
]
