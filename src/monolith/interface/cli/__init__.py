"""Monolith command-line interface."""

from monolith.interface.cli.main import cli_entrypoint, main

__all__ = ["cli_entrypoint", "main"]
