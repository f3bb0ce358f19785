"""Hierarchical input fingerprints for monolith modules.

A module's fingerprint captures everything that could make its build output
stale:

1. Its own sources, tests and resources (file paths + content)
2. Its declared dependency coordinates
3. The final fingerprints of every internal module it depends on

Upstream fingerprints are computed recursively and memoized in a
FingerprintCache that lives for one command invocation, so a module shared
by several dependents (a diamond) is hashed exactly once.

Example:
    >>> cache = FingerprintCache()
    >>> record = compute_fingerprint(graph["example/app-a"], graph, cache)
    >>> record.final.encode()
    'sha1:...'
    >>> cache.computed["example/lib-a"]
    1
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from monolith.foundation.errors import CyclicDependencyError
from monolith.fingerprint.digest import DEFAULT_ALGORITHM, Digest, aggregate, empty_digest
from monolith.fingerprint.hasher import hash_dependencies, hash_paths
from monolith.project.graph import DependencyGraph
from monolith.project.models import Module

logger = logging.getLogger(__name__)


class FingerprintKind(Enum):
    """The named digests making up a fingerprint record."""

    SOURCES = "sources"
    TESTS = "tests"
    RESOURCES = "resources"
    DEPS = "deps"
    UPSTREAM = "upstream"
    FINAL = "final"


CONTENT_KINDS: tuple[FingerprintKind, ...] = (
    FingerprintKind.SOURCES,
    FingerprintKind.TESTS,
    FingerprintKind.RESOURCES,
    FingerprintKind.DEPS,
    FingerprintKind.UPSTREAM,
)
"""Content kinds, in the priority order used to explain a change."""


@dataclass(frozen=True, slots=True)
class FingerprintRecord:
    """Digests of one module's inputs at one point in time.

    ``final`` aggregates the five content digests. ``timestamp`` is
    informational (milliseconds since the epoch) and excluded from equality.
    """

    sources: Digest
    tests: Digest
    resources: Digest
    deps: Digest
    upstream: Digest
    final: Digest
    timestamp: int = field(default=0, compare=False)

    def get(self, kind: FingerprintKind) -> Digest:
        """Look up a digest by kind."""
        return getattr(self, kind.value)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        data: dict[str, Any] = {kind.value: self.get(kind).encode() for kind in FingerprintKind}
        data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FingerprintRecord:
        """Deserialize from dict.

        Raises:
            KeyError: If a digest field is missing.
            MonolithError: DIGEST_INVALID if a digest cannot be decoded.
        """
        digests = {kind.value: Digest.decode(data[kind.value]) for kind in FingerprintKind}
        timestamp = data.get("timestamp", 0)
        if not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise ValueError(f"timestamp must be an integer, got {timestamp!r}")
        return cls(**digests, timestamp=timestamp)

    @classmethod
    def assemble(
        cls,
        sources: Digest,
        tests: Digest,
        resources: Digest,
        deps: Digest,
        upstream: Digest,
        algorithm: str = DEFAULT_ALGORITHM,
        timestamp: int | None = None,
    ) -> FingerprintRecord:
        """Build a record, deriving ``final`` from the five content digests."""
        return cls(
            sources=sources,
            tests=tests,
            resources=resources,
            deps=deps,
            upstream=upstream,
            final=aggregate([sources, tests, resources, deps, upstream], algorithm),
            timestamp=int(time.time() * 1000) if timestamp is None else timestamp,
        )


class FingerprintCache:
    """Per-invocation memo of computed records, keyed by module name.

    Never persisted. ``computed`` counts how many times each module was
    actually hashed (as opposed to served from the cache).
    """

    def __init__(self) -> None:
        self._records: dict[str, FingerprintRecord] = {}
        self._lock = threading.Lock()
        self.computed: Counter[str] = Counter()

    def get(self, name: str) -> FingerprintRecord | None:
        with self._lock:
            return self._records.get(name)

    def put(self, name: str, record: FingerprintRecord) -> FingerprintRecord:
        """Store a record and return the one now cached for ``name``."""
        with self._lock:
            self._records[name] = record
            self.computed[name] += 1
            return record

    def records(self) -> dict[str, FingerprintRecord]:
        """Snapshot of every cached record."""
        with self._lock:
            return dict(self._records)


def compute_fingerprint(
    module: Module,
    graph: DependencyGraph,
    cache: FingerprintCache,
    algorithm: str = DEFAULT_ALGORITHM,
    workers: int = 1,
    _chain: tuple[str, ...] = (),
) -> FingerprintRecord:
    """Compute (or fetch from ``cache``) the fingerprint record of a module.

    Args:
        module: The module to fingerprint.
        graph: Dependency graph over every module of the monolith.
        cache: Memo shared by every computation of this invocation.
        algorithm: hashlib algorithm name.
        workers: Threads used to hash the files of one category.

    Returns:
        The module's FingerprintRecord.

    Raises:
        CyclicDependencyError: If the module transitively depends on itself.
        MonolithError: FILE_UNREADABLE if an input file cannot be read.
    """
    if module.name in _chain:
        raise CyclicDependencyError(list(_chain[_chain.index(module.name):]))

    cached = cache.get(module.name)
    if cached is not None:
        return cached

    chain = (*_chain, module.name)
    logger.debug("Fingerprinting %s", module.name)

    def category(paths: tuple[str, ...]) -> Digest:
        return hash_paths([module.resolve_path(p) for p in paths], algorithm, workers)

    upstream_finals = [
        compute_fingerprint(graph[name], graph, cache, algorithm, workers, chain).final
        for name in graph.upstream(module.name)
    ]

    record = FingerprintRecord.assemble(
        sources=category(module.source_paths),
        tests=category(module.test_paths),
        resources=category(module.resource_paths),
        deps=hash_dependencies(module.dependencies, algorithm),
        upstream=aggregate(upstream_finals, algorithm) if upstream_finals else empty_digest(algorithm),
        algorithm=algorithm,
    )
    return cache.put(module.name, record)
