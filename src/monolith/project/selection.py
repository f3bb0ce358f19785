"""Resolve module selection criteria to a concrete set of module names.

The fingerprinting core only ever receives the resolved list; it performs
no selection logic itself.
"""

from __future__ import annotations

from collections.abc import Iterable

from monolith.foundation.errors import module_not_found
from monolith.project.graph import DependencyGraph
from monolith.project.models import artifact_name, condense_name


def resolve_name(graph: DependencyGraph, name: str, definition: str = "monolith.yaml") -> str:
    """Resolve a full or bare artifact name to a module name.

    Raises:
        MonolithError: MODULE_NOT_FOUND if no module (or more than one) matches.
    """
    condensed = condense_name(name)
    if condensed in graph:
        return condensed

    candidates = [n for n in graph if artifact_name(n) == condensed]
    if len(candidates) == 1:
        return candidates[0]
    raise module_not_found(name, definition)


def select(
    graph: DependencyGraph,
    names: Iterable[str] = (),
    upstream_of: Iterable[str] = (),
    downstream_of: Iterable[str] = (),
    definition: str = "monolith.yaml",
) -> list[str]:
    """Select modules by name, upstream closure and downstream closure.

    Criteria are unioned. With no criteria every module is selected.

    Returns:
        Sorted module names.
    """
    names = [resolve_name(graph, n, definition) for n in names]
    upstream_of = [resolve_name(graph, n, definition) for n in upstream_of]
    downstream_of = [resolve_name(graph, n, definition) for n in downstream_of]

    if not (names or upstream_of or downstream_of):
        return sorted(graph)

    selected: set[str] = set(names)
    if upstream_of:
        selected |= graph.upstream_closure(upstream_of)
    if downstream_of:
        selected |= graph.downstream_closure(downstream_of)
    return sorted(selected)
