"""CLI Error Handler.

Renders MonolithError for humans (rich, stderr) or as JSON for scripts,
then exits with status 1.
"""

import json
import sys
from typing import NoReturn

from rich.console import Console
from rich.text import Text

from monolith.foundation.errors import ErrorCode, MonolithError

_ICONS = {
    "graph": "🔗",
    "encoding": "🧩",
    "config": "⚙️",
    "io": "📁",
}


def _wrap(error: MonolithError | Exception) -> MonolithError:
    if isinstance(error, MonolithError):
        return error
    return MonolithError(
        code=ErrorCode.FILE_UNREADABLE if isinstance(error, OSError) else ErrorCode.PROJECT_INVALID,
        context={"path": getattr(error, "filename", "") or "", "detail": str(error)},
        cause=error,
    )


def handle_error(
    error: MonolithError | Exception,
    json_output: bool = False,
    console: Console | None = None,
) -> NoReturn:
    """Report an error and exit.

    Args:
        error: The error to handle (MonolithError or generic Exception)
        json_output: If True, write a JSON object to stderr instead
        console: Console to print to (default: a stderr console)

    Raises:
        SystemExit: Always exits with code 1
    """
    error = _wrap(error)

    if json_output:
        error_dict = error.to_dict()
        if error.cause:
            error_dict["cause"] = str(error.cause)
        print(json.dumps(error_dict, default=str), file=sys.stderr)
        sys.exit(1)

    console = console or Console(stderr=True)
    header = Text()
    header.append(f"{_ICONS.get(error.category, '❌')} ", style="bold")
    header.append(error.error_id, style="bold red")
    header.append(f" {error.message}")
    console.print(header)

    if error.recovery_hints:
        console.print("\n[bold]What you can do:[/]")
        for i, hint in enumerate(error.recovery_hints, 1):
            console.print(f"  {i}. {hint}")
    sys.exit(1)
