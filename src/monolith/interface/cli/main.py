"""Main CLI entry point.

    monolith fingerprint info
    monolith fingerprint mark build,deploy --upstream-of app-a
    monolith -w path/to/repo --debug fingerprint clear build
"""

import sys
from pathlib import Path

import click
from rich.console import Console

from monolith import __version__
from monolith.foundation.config import load_config
from monolith.foundation.errors import MonolithError
from monolith.foundation.logging import configure_logging
from monolith.interface.cli.fingerprint_cmd import fingerprint
from monolith.interface.cli.helpers import CliState

console = Console()


@click.group()
@click.version_option(__version__, prog_name="monolith")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--workspace", "-w", type=click.Path(exists=True, file_okay=False, path_type=Path),
              default=".", help="Monolith root directory")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Explicit config file")
@click.pass_context
def main(ctx: click.Context, debug: bool, workspace: Path, config_path: Path | None) -> None:
    """Track input fingerprints of the modules in a monolith.

    \b
    Examples:
        monolith fingerprint info
        monolith fingerprint mark build
        monolith fingerprint info build --downstream-of lib-a
    """
    workspace = workspace.resolve()
    config = load_config(config_path, root=workspace)
    configure_logging(
        debug=debug,
        config_debug=config.debug,
        persist=config.persist_logs,
        log_root=workspace,
    )
    ctx.obj = CliState(workspace=workspace, config=config)


main.add_command(fingerprint)


def cli_entrypoint() -> None:
    """Console-script entry point with global error handling.

    Catches MonolithError and displays it instead of a traceback.
    """
    try:
        main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("\n[dim]Aborted[/]")
        sys.exit(130)
    except MonolithError as e:
        from monolith.interface.cli.error_handler import handle_error

        handle_error(e)
