"""Module data models.

A monolith is a set of modules living under one repository root. Each module
declares path roots for sources, tests and resources, plus a list of
dependencies. Dependencies naming another module of the monolith become
internal edges of the dependency graph.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def condense_name(name: str) -> str:
    """Condense a qualified ``group/artifact`` name.

    The group is dropped when it repeats the artifact name, so
    ``foo/foo`` and ``foo`` name the same module.

    Example:
        >>> condense_name("example/lib-a")
        'example/lib-a'
        >>> condense_name("foo/foo")
        'foo'
    """
    group, sep, artifact = name.partition("/")
    if not sep:
        return name
    if not group or group == artifact:
        return artifact
    return name


def artifact_name(name: str) -> str:
    """Return the artifact part of a qualified name."""
    return name.rpartition("/")[2]


@dataclass(frozen=True, slots=True)
class ExternalDependency:
    """A declared dependency coordinate.

    Attributes:
        name: Qualified name, condensed (``group/artifact`` or ``artifact``).
        version: Version string as declared.
        options: Extra declaration keys (scope, classifier, exclusions...).
    """

    name: str
    version: str
    options: tuple[tuple[str, Any], ...] = ()

    def canonical(self) -> str:
        """Stable serialization, independent of option declaration order."""
        data = {key: value for key, value in self.options}
        data["name"] = self.name
        data["version"] = self.version
        return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)

    @classmethod
    def from_value(cls, value: Any) -> ExternalDependency:
        """Parse a dependency declared as a mapping or a ``[name, version]`` pair.

        Raises:
            ValueError: If the declaration has no usable name, or a version
                that is not a string (YAML reads an unquoted 1.10 as 1.1).
        """
        if isinstance(value, dict):
            data = dict(value)
            name = data.pop("name", None)
            version = data.pop("version", "")
        elif isinstance(value, (list, tuple)) and value:
            name = value[0]
            version = value[1] if len(value) > 1 else ""
            rest = list(value[2:])
            if len(rest) % 2:
                raise ValueError(f"odd number of options in dependency {value!r}")
            data = dict(zip(rest[::2], rest[1::2], strict=True))
        elif isinstance(value, str):
            name, _, version = value.partition(" ")
            data = {}
        else:
            raise ValueError(f"unsupported dependency declaration {value!r}")

        if not name:
            raise ValueError(f"dependency without a name: {value!r}")
        if not isinstance(version, str):
            raise ValueError(
                f"version {version!r} of {name} must be a string; quote it so YAML keeps it verbatim"
            )

        options = tuple(sorted((str(k), _freeze(v)) for k, v in data.items()))
        return cls(name=condense_name(str(name)), version=version.strip(), options=options)


def _freeze(value: Any) -> Any:
    """Make YAML values hashable so dependencies can live in frozen dataclasses."""
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    return value


@dataclass(frozen=True, slots=True)
class Module:
    """A module of the monolith.

    Attributes:
        name: Condensed qualified name, unique within the monolith.
        root: Module root directory.
        version: Declared version (informational).
        source_paths: Source path roots, relative to root unless absolute.
        test_paths: Test path roots.
        resource_paths: Resource path roots.
        dependencies: Declared dependencies, internal and external.
    """

    name: str
    root: Path
    version: str = ""
    source_paths: tuple[str, ...] = ("src",)
    test_paths: tuple[str, ...] = ("test",)
    resource_paths: tuple[str, ...] = ("resources",)
    dependencies: tuple[ExternalDependency, ...] = field(default_factory=tuple)

    def resolve_path(self, path: str) -> Path:
        """Resolve a declared path root against the module root."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.root / candidate

    def dependency_names(self) -> tuple[str, ...]:
        """Names of every declared dependency."""
        return tuple(dep.name for dep in self.dependencies)


@dataclass(frozen=True, slots=True)
class Monolith:
    """The metaproject: repository root plus its discovered modules."""

    root: Path
    name: str
    modules: tuple[Module, ...] = ()
    definition: str = "monolith.yaml"

    def module_names(self) -> list[str]:
        """Sorted names of every module."""
        return sorted(module.name for module in self.modules)
