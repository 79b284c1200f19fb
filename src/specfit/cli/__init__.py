"""Command-line interface for specfit."""

from specfit.cli.app import app

__all__ = ["app"]
