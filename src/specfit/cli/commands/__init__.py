"""CLI command modules for specfit.

Each module exports a command function carrying its Typer annotations;
``specfit.cli.app`` registers them.
"""

from specfit.cli.commands.baseline import baseline_command
from specfit.cli.commands.decay import decay_command
from specfit.cli.commands.global_ import global_command
from specfit.cli.commands.info import info_command
from specfit.cli.commands.init import init_command
from specfit.cli.commands.peaks import peaks_command

__all__ = [
    "baseline_command",
    "decay_command",
    "global_command",
    "info_command",
    "init_command",
    "peaks_command",
]
