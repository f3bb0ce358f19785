"""Tests for the module dependency graph."""

from pathlib import Path

import pytest

from monolith.project.graph import DependencyGraph
from monolith.project.models import ExternalDependency, Module


def _module(tmp_path: Path, name: str, *deps: str) -> Module:
    return Module(
        name=name,
        root=tmp_path / name,
        dependencies=tuple(ExternalDependency(dep, "1.0") for dep in deps),
    )


class TestDependencyGraph:
    """Tests for DependencyGraph construction and queries."""

    def test_only_internal_edges(self, graph: DependencyGraph) -> None:
        """External dependencies are not graph edges."""
        assert graph.upstream("example/app-c") == ("example/lib-a", "example/lib-b")
        assert graph.upstream("example/lib-a") == ("example/lib-d",)
        assert graph.upstream("example/lib-d") == ()

    def test_dependents(self, graph: DependencyGraph) -> None:
        assert graph.dependents("example/lib-d") == {"example/lib-a", "example/lib-b"}
        assert graph.dependents("example/app-c") == set()

    def test_container_protocol(self, graph: DependencyGraph) -> None:
        assert len(graph) == 4
        assert "example/lib-a" in graph
        assert "org.clojure/clojure" not in graph
        assert graph.get("nope") is None
        with pytest.raises(KeyError):
            graph["nope"]

    def test_duplicate_names_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="defined twice"):
            DependencyGraph.from_modules([_module(tmp_path, "a"), _module(tmp_path, "a")])

    def test_upstream_closure(self, graph: DependencyGraph) -> None:
        """The closure includes the starting modules."""
        assert graph.upstream_closure(["example/lib-a"]) == {"example/lib-a", "example/lib-d"}
        assert graph.upstream_closure(["example/app-c"]) == set(graph)

    def test_downstream_closure(self, graph: DependencyGraph) -> None:
        assert graph.downstream_closure(["example/lib-b"]) == {"example/lib-b", "example/app-c"}
        assert graph.downstream_closure(["example/lib-d"]) == set(graph)


class TestCycles:
    """Tests for cycle detection and ordering."""

    def test_acyclic(self, graph: DependencyGraph) -> None:
        assert graph.detect_cycle() is None

    def test_detect_cycle(self, tmp_path: Path) -> None:
        graph = DependencyGraph.from_modules([
            _module(tmp_path, "a", "b"),
            _module(tmp_path, "b", "c"),
            _module(tmp_path, "c", "a"),
        ])

        assert graph.detect_cycle() == ["a", "b", "c"]
