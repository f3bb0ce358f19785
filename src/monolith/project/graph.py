"""Internal dependency graph between monolith modules.

Edges point from a module to the modules it depends on ("upstream").
The graph is expected to be acyclic; ``detect_cycle`` reports the first
loop found, and FingerprintContext refuses to start on one.

Example:
    >>> graph = DependencyGraph.from_modules(modules)
    >>> graph.upstream("example/app-a")
    ('example/lib-a', 'example/lib-b')
    >>> graph.downstream_closure(["example/lib-a"])
    {'example/lib-a', 'example/app-a'}
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from monolith.project.models import Module


@dataclass
class DependencyGraph:
    """Modules keyed by name, with forward and reverse internal edges."""

    _modules: dict[str, Module] = field(default_factory=dict)
    """Mapping from module name to module."""

    _upstream: dict[str, tuple[str, ...]] = field(default_factory=dict)
    """Mapping from module name to names of the modules it depends on."""

    _dependents: dict[str, set[str]] = field(default_factory=dict)
    """Mapping from module name to names of the modules depending on it."""

    @classmethod
    def from_modules(cls, modules: Iterable[Module]) -> DependencyGraph:
        """Build the graph, keeping only dependencies that name a module.

        Raises:
            ValueError: If two modules share a name.
        """
        graph = cls()
        for module in modules:
            if module.name in graph._modules:
                raise ValueError(f"Module '{module.name}' is defined twice")
            graph._modules[module.name] = module

        for name, module in graph._modules.items():
            internal = sorted(
                {dep for dep in module.dependency_names() if dep in graph._modules}
            )
            graph._upstream[name] = tuple(internal)
            graph._dependents.setdefault(name, set())
            for dep in internal:
                graph._dependents.setdefault(dep, set()).add(name)
        return graph

    def get(self, name: str) -> Module | None:
        """Get a module by name."""
        return self._modules.get(name)

    def __getitem__(self, name: str) -> Module:
        """Get a module by name, raising KeyError if not found."""
        return self._modules[name]

    def __contains__(self, name: str) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._modules)

    @property
    def modules(self) -> dict[str, Module]:
        """All modules (read-only view)."""
        return dict(self._modules)

    def upstream(self, name: str) -> tuple[str, ...]:
        """Direct internal dependencies of a module (empty for unknown names)."""
        return self._upstream.get(name, ())

    def dependents(self, name: str) -> set[str]:
        """Modules that directly depend on a module."""
        return self._dependents.get(name, set()).copy()

    def upstream_closure(self, names: Iterable[str]) -> set[str]:
        """The given modules plus everything they transitively depend on."""
        return self._closure(names, self.upstream)

    def downstream_closure(self, names: Iterable[str]) -> set[str]:
        """The given modules plus everything transitively depending on them."""
        return self._closure(names, self.dependents)

    def _closure(self, names: Iterable[str], step) -> set[str]:
        seen: set[str] = set()
        queue = deque(names)
        while queue:
            name = queue.popleft()
            if name in seen:
                continue
            seen.add(name)
            queue.extend(step(name))
        return seen

    def detect_cycle(self) -> list[str] | None:
        """Detect if there's a cycle in the dependency graph.

        Returns:
            Module names forming the cycle, in dependency order, or None
        """
        white, gray, black = 0, 1, 2
        color: dict[str, int] = dict.fromkeys(self._modules, white)
        stack: list[str] = []

        def dfs(node: str) -> list[str] | None:
            color[node] = gray
            stack.append(node)
            for dep in self._upstream.get(node, ()):
                if color[dep] == gray:
                    return stack[stack.index(dep):]
                if color[dep] == white:
                    cycle = dfs(dep)
                    if cycle:
                        return cycle
            stack.pop()
            color[node] = black
            return None

        for name in self._modules:
            if color[name] == white:
                cycle = dfs(name)
                if cycle:
                    return cycle
        return None
