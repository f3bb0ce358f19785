"""Fingerprint command group - change tracking against named markers.

Provides commands to:
- Report which modules changed since a marker was set, and why
- Save current fingerprints under one or more markers
- Clear saved fingerprints
"""

import json
from collections.abc import Callable

import click

from monolith.fingerprint.compare import ChangeReason, FingerprintContext
from monolith.fingerprint.markers import MarkerReport, clear, mark_all, parse_markers, report
from monolith.interface.cli.helpers import CliState, console, stderr_console
from monolith.project.selection import select

# label, style, list module names
_REASON_DISPLAY: dict[ChangeReason, tuple[str, str, bool]] = {
    ChangeReason.UNKNOWN: ("different fingerprint", "red", True),
    ChangeReason.NEW_PROJECT: ("new module", "red", True),
    ChangeReason.SOURCES: ("sources changed", "red", True),
    ChangeReason.TESTS: ("tests changed", "red", True),
    ChangeReason.RESOURCES: ("resources changed", "red", True),
    ChangeReason.DEPS: ("external dependency changed", "yellow", True),
    ChangeReason.UPSTREAM: ("downstream of affected modules", "yellow", False),
    ChangeReason.UP_TO_DATE: ("up-to-date", "green", False),
}


def selection_options(fn: Callable) -> Callable:
    """Attach the module selection options shared by every subcommand."""
    fn = click.option("--downstream-of", "downstream_of", multiple=True, metavar="NAME",
                      help="Select NAME and every module depending on it")(fn)
    fn = click.option("--upstream-of", "upstream_of", multiple=True, metavar="NAME",
                      help="Select NAME and every module it depends on")(fn)
    fn = click.option("--in", "names", multiple=True, metavar="NAME",
                      help="Select a module by name")(fn)
    return fn


def _targets(ctx: FingerprintContext, state: CliState, names, upstream_of, downstream_of) -> list[str]:
    return select(
        ctx.graph,
        names=names,
        upstream_of=upstream_of,
        downstream_of=downstream_of,
        definition=state.config.project.definition,
    )


def _markers(value: str) -> list[str]:
    try:
        return parse_markers(value)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="MARKERS") from e


@click.group()
def fingerprint() -> None:
    """Module input fingerprints and change tracking.

    A fingerprint covers a module's sources, tests, resources, declared
    dependencies and the fingerprints of every module it depends on.

    \b
    Examples:
        monolith fingerprint info
        monolith fingerprint info build --upstream-of app-a
        monolith fingerprint mark build,deploy
        monolith fingerprint clear build --in lib-a
    """
    pass


@fingerprint.command("info")
@click.argument("marker", required=False)
@selection_options
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def fingerprint_info(
    state: CliState,
    marker: str | None,
    names: tuple[str, ...],
    upstream_of: tuple[str, ...],
    downstream_of: tuple[str, ...],
    json_output: bool,
) -> None:
    """Show how many modules changed since MARKER (default: every marker).

    \b
    Examples:
        monolith fingerprint info
        monolith fingerprint info build --downstream-of lib-a --json
    """
    ctx = state.context()
    targets = _targets(ctx, state, names, upstream_of, downstream_of)
    markers = [marker] if marker else ctx.markers

    if not markers:
        stderr_console.print("No saved fingerprint markers")
        if json_output:
            print("[]")
        return
    if not targets:
        stderr_console.print("No modules selected")
        if json_output:
            print("[]")
        return

    reports = report(ctx, markers, targets)

    if json_output:
        print(json.dumps([r.to_dict() for r in reports], indent=2))
        return

    for i, marker_report in enumerate(reports):
        if i:
            console.print()
        _display_report(marker_report)


def _display_report(marker_report: MarkerReport) -> None:
    """Display one marker's comparison in rich format."""
    pct = marker_report.percent_changed
    if pct == 0.0:
        color = "green"
    elif pct < 50:
        color = "yellow"
    else:
        color = "red"

    console.print(
        f"[{color}]{pct:.2f}%[/] out of {marker_report.total} modules have out-of-date "
        f"[bold]{marker_report.marker}[/] fingerprints:\n",
        highlight=False,
    )
    for reason, names in marker_report.groups():
        label, style, list_names = _REASON_DISPLAY[reason]
        line = f"* [{style}]{len(names)}[/] {label}"
        if list_names:
            line += ": " + ", ".join(f"[{style}]{n}[/]" for n in names)
        console.print(line, highlight=False)


@fingerprint.command("mark")
@click.argument("markers", metavar="MARKERS")
@selection_options
@click.pass_obj
def fingerprint_mark(
    state: CliState,
    markers: str,
    names: tuple[str, ...],
    upstream_of: tuple[str, ...],
    downstream_of: tuple[str, ...],
) -> None:
    """Save current fingerprints under MARKERS (comma-separated).

    \b
    Examples:
        monolith fingerprint mark build
        monolith fingerprint mark build,deploy --upstream-of app-a
    """
    marker_list = _markers(markers)
    ctx = state.context()
    targets = _targets(ctx, state, names, upstream_of, downstream_of)
    if not targets:
        stderr_console.print("No modules selected")
        return

    saved = mark_all(ctx, marker_list, targets)
    console.print(
        f"Set [bold]{len(marker_list)}[/] markers for [bold]{len(saved)}[/] modules",
        highlight=False,
    )


@fingerprint.command("clear")
@click.argument("markers", metavar="[MARKERS]", required=False)
@selection_options
@click.pass_obj
def fingerprint_clear(
    state: CliState,
    markers: str | None,
    names: tuple[str, ...],
    upstream_of: tuple[str, ...],
    downstream_of: tuple[str, ...],
) -> None:
    """Remove saved fingerprints under MARKERS (default: every marker).

    \b
    Examples:
        monolith fingerprint clear
        monolith fingerprint clear build --upstream-of lib-b
    """
    marker_list = _markers(markers) if markers else None
    ctx = state.context()
    targets = _targets(ctx, state, names, upstream_of, downstream_of)
    if not targets:
        stderr_console.print("No modules selected")
        return

    removed = clear(ctx.store, marker_list, targets)
    console.print(f"Cleared [bold]{removed}[/] fingerprints", highlight=False)
