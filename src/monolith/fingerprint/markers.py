"""Marker operations: save, mark, clear and report.

A marker is a named checkpoint ("build", "deploy", ...) under which module
fingerprints are saved and later compared.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from monolith.fingerprint.compare import (
    REPORT_ORDER,
    ChangeReason,
    FingerprintContext,
    explain,
)
from monolith.fingerprint.fingerprinter import FingerprintRecord
from monolith.fingerprint.store import FingerprintStore, StoreState

logger = logging.getLogger(__name__)


def parse_markers(value: str) -> list[str]:
    """Split a comma-separated marker list, dropping blanks and duplicates.

    Raises:
        ValueError: If no marker name remains.
    """
    markers = list(dict.fromkeys(m.strip() for m in value.split(",") if m.strip()))
    if not markers:
        raise ValueError(f"no marker names in {value!r}")
    return markers


def _merge(state: StoreState, markers: Iterable[str], records: dict[str, FingerprintRecord]) -> StoreState:
    updated = {marker: dict(modules) for marker, modules in state.items()}
    for marker in markers:
        updated.setdefault(marker, {}).update(records)
    return updated


def save(ctx: FingerprintContext, marker: str, name: str) -> FingerprintRecord:
    """Save the current fingerprint of one module under ``marker``.

    Merges into the stored state; other entries are kept.
    """
    current = ctx.fingerprint(name)
    ctx.store.update(_merge, [marker], {name: current})
    logger.info("Saved %s fingerprint for %s", marker, name)
    return current


def mark_all(
    ctx: FingerprintContext,
    markers: Iterable[str],
    names: Iterable[str],
) -> dict[str, FingerprintRecord]:
    """Save current fingerprints of several modules under several markers.

    Records are computed once per module (sharing the context cache) and
    merged into every marker in a single store write. Names that are not
    modules of the context are ignored.

    Returns:
        The saved records, keyed by module name.
    """
    markers = list(markers)
    current = {
        name: ctx.fingerprint(name)
        for name in names
        if name in ctx.graph
    }
    ctx.store.update(_merge, markers, current)
    logger.info("Set %d markers for %d modules", len(markers), len(current))
    return current


def clear(
    store: FingerprintStore,
    markers: Iterable[str] | None,
    names: Iterable[str],
) -> int:
    """Remove the entries of ``names`` under each marker.

    Args:
        store: The fingerprint store.
        markers: Markers to clear, or None for every marker in the store.
        names: Module names whose entries are removed.

    Returns:
        Number of entries removed. Emptied markers are kept.
    """
    names = set(names)
    removed = 0

    def remove(state: StoreState) -> StoreState:
        nonlocal removed
        targets = list(state) if markers is None else list(markers)
        updated = {marker: dict(modules) for marker, modules in state.items()}
        for marker in targets:
            modules = updated.get(marker)
            if not modules:
                continue
            for name in names & modules.keys():
                del modules[name]
                removed += 1
        return updated

    store.update(remove)
    logger.info("Cleared %d fingerprint entries", removed)
    return removed


@dataclass(frozen=True, slots=True)
class MarkerReport:
    """Comparison of a set of modules against one marker."""

    marker: str
    total: int
    changed: tuple[str, ...]
    reasons: dict[ChangeReason, tuple[str, ...]] = field(default_factory=dict)

    @property
    def percent_changed(self) -> float:
        """Share of changed modules, 0.0 when nothing was compared."""
        if not self.total:
            return 0.0
        return 100.0 * len(self.changed) / self.total

    def groups(self) -> list[tuple[ChangeReason, tuple[str, ...]]]:
        """Non-empty reason groups in report order."""
        return [(r, self.reasons[r]) for r in REPORT_ORDER if self.reasons.get(r)]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "marker": self.marker,
            "total": self.total,
            "changed": list(self.changed),
            "percent_changed": self.percent_changed,
            "reasons": {reason.value: list(names) for reason, names in self.groups()},
        }


def report(
    ctx: FingerprintContext,
    markers: Iterable[str],
    names: Iterable[str],
) -> list[MarkerReport]:
    """Compare ``names`` against each marker of ``markers``."""
    names = sorted(names)
    reports = []
    for marker in markers:
        grouped: dict[ChangeReason, list[str]] = {}
        for name in names:
            grouped.setdefault(explain(ctx, marker, name), []).append(name)
        changed = tuple(
            name
            for reason, group in grouped.items()
            if reason is not ChangeReason.UP_TO_DATE
            for name in group
        )
        reports.append(
            MarkerReport(
                marker=marker,
                total=len(names),
                changed=tuple(sorted(changed)),
                reasons={reason: tuple(group) for reason, group in grouped.items()},
            )
        )
    return reports
