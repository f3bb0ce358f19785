"""Allow ``python -m monolith``."""

from monolith.interface.cli import cli_entrypoint

if __name__ == "__main__":
    cli_entrypoint()
