"""Compare current fingerprints against the ones saved under a marker.

A FingerprintContext snapshots the fingerprint file exactly once. Every
comparison made through the context uses that snapshot, so a ``mark``
running elsewhere cannot perturb an in-flight report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from monolith.foundation.errors import CyclicDependencyError, module_not_found
from monolith.fingerprint.digest import DEFAULT_ALGORITHM
from monolith.fingerprint.fingerprinter import (
    CONTENT_KINDS,
    FingerprintCache,
    FingerprintRecord,
    compute_fingerprint,
)
from monolith.fingerprint.store import FingerprintStore, StoreState
from monolith.project.graph import DependencyGraph
from monolith.project.models import Module, Monolith

logger = logging.getLogger(__name__)


class ChangeReason(Enum):
    """Why a module is (or is not) considered changed since a marker."""

    UNKNOWN = "unknown"
    """Final digests differ but no individual kind does."""

    NEW_PROJECT = "new-project"
    """No record saved under the marker."""

    SOURCES = "sources"
    TESTS = "tests"
    RESOURCES = "resources"
    DEPS = "deps"
    UPSTREAM = "upstream"

    UP_TO_DATE = "up-to-date"
    """Final digests are equal."""


REPORT_ORDER: tuple[ChangeReason, ...] = tuple(ChangeReason)
"""Order in which reason groups are reported."""


@dataclass
class FingerprintContext:
    """Stateful context for one fingerprinting command.

    Attributes:
        monolith: The metaproject (root, definition file).
        graph: Dependency graph over the modules being fingerprinted.
        store: Store the snapshot was read from.
        initial: Snapshot of the store taken at creation.
        cache: Memo of records computed during this invocation.
        algorithm: hashlib algorithm used for every digest.
        workers: Threads used to hash the files of one category.
    """

    monolith: Monolith
    graph: DependencyGraph
    store: FingerprintStore
    initial: StoreState
    cache: FingerprintCache = field(default_factory=FingerprintCache)
    algorithm: str = DEFAULT_ALGORITHM
    workers: int = 1

    @classmethod
    def create(
        cls,
        monolith: Monolith,
        modules: list[Module] | tuple[Module, ...] | None = None,
        store: FingerprintStore | None = None,
        algorithm: str = DEFAULT_ALGORITHM,
        workers: int = 1,
    ) -> FingerprintContext:
        """Build the graph and snapshot the store.

        Args:
            monolith: The metaproject.
            modules: Modules to consider (default: every module of the monolith).
            store: Fingerprint store (default: the monolith root's store).
            algorithm: hashlib algorithm name.
            workers: Threads used to hash files.

        Raises:
            CyclicDependencyError: If the modules depend on each other in a loop.
        """
        graph = DependencyGraph.from_modules(monolith.modules if modules is None else modules)
        cycle = graph.detect_cycle()
        if cycle:
            raise CyclicDependencyError(cycle)
        store = store or FingerprintStore(monolith.root)
        initial = store.read()
        logger.debug(
            "Fingerprint context: %d modules, markers=%s",
            len(graph),
            sorted(initial),
        )
        return cls(
            monolith=monolith,
            graph=graph,
            store=store,
            initial=initial,
            algorithm=algorithm,
            workers=workers,
        )

    @property
    def markers(self) -> list[str]:
        """Markers present in the snapshot."""
        return sorted(self.initial)

    def fingerprint(self, name: str) -> FingerprintRecord:
        """Current record for a module, computed at most once per context.

        Raises:
            MonolithError: MODULE_NOT_FOUND if the module is not in the graph.
        """
        module = self.graph.get(name)
        if module is None:
            raise module_not_found(name, self.monolith.definition)
        return compute_fingerprint(
            module, self.graph, self.cache, self.algorithm, self.workers
        )

    def saved(self, marker: str, name: str) -> FingerprintRecord | None:
        """Record saved under ``marker`` in the snapshot, if any."""
        return self.initial.get(marker, {}).get(name)


def is_changed(ctx: FingerprintContext, marker: str, name: str) -> bool:
    """Whether a module changed since it was last marked.

    A module never marked is always changed.
    """
    past = ctx.saved(marker, name)
    current = ctx.fingerprint(name)
    return past is None or past.final != current.final


def explain(ctx: FingerprintContext, marker: str, name: str) -> ChangeReason:
    """Classify why a module is considered changed.

    The first differing kind is reported, in the order sources, tests,
    resources, deps, upstream.
    """
    past = ctx.saved(marker, name)
    current = ctx.fingerprint(name)

    if past is None:
        return ChangeReason.NEW_PROJECT
    if past.final == current.final:
        return ChangeReason.UP_TO_DATE

    for kind in CONTENT_KINDS:
        if past.get(kind) != current.get(kind):
            return ChangeReason(kind.value)

    logger.warning(
        "%s: final fingerprint differs under '%s' but every component matches",
        name,
        marker,
    )
    return ChangeReason.UNKNOWN
