"""Shared helper functions for CLI commands."""

from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from monolith.fingerprint.compare import FingerprintContext
from monolith.fingerprint.store import FingerprintStore
from monolith.foundation.config import MonolithConfig
from monolith.project.loader import load_monolith

console = Console()
# Warnings go to stderr so --json output stays clean
stderr_console = Console(stderr=True)


@dataclass
class CliState:
    """Per-invocation state shared with subcommands through ``ctx.obj``."""

    workspace: Path
    config: MonolithConfig

    def store(self) -> FingerprintStore:
        """The fingerprint store at the workspace root."""
        return FingerprintStore(self.workspace, self.config.fingerprint.store_file)

    def context(self) -> FingerprintContext:
        """Load the monolith and snapshot its fingerprint store."""
        monolith = load_monolith(self.workspace, self.config.project)
        return FingerprintContext.create(
            monolith,
            store=self.store(),
            algorithm=self.config.fingerprint.algorithm,
            workers=self.config.fingerprint.workers,
        )
