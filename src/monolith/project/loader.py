"""Load a monolith definition and its modules from YAML.

Layout::

    monolith.yaml            # name + project-dirs globs
    libs/lib-a/module.yaml   # one file per module
    apps/app-a/module.yaml

Example ``module.yaml``::

    name: example/lib-a
    version: 0.1.0
    source-paths: [src]
    test-paths: [test]
    resource-paths: [resources]
    dependencies:
      - [org.clojure/clojure, "1.9.0"]
      - name: example/lib-b
        version: MONOLITH-SNAPSHOT
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from monolith.foundation.config import ProjectConfig
from monolith.foundation.errors import ErrorCode, MonolithError
from monolith.project.models import ExternalDependency, Module, Monolith, condense_name

logger = logging.getLogger(__name__)


def _invalid(path: Path, detail: str, cause: Exception | None = None) -> MonolithError:
    return MonolithError(
        code=ErrorCode.PROJECT_INVALID,
        context={"path": str(path), "detail": detail},
        cause=cause,
    )


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise _invalid(path, f"YAML parse error: {e}", e) from e
    except OSError as e:
        raise MonolithError(
            code=ErrorCode.FILE_UNREADABLE,
            context={"path": str(path), "detail": str(e)},
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise _invalid(path, "expected a mapping at the top level")
    return data


def _paths(data: dict[str, Any], key: str, default: tuple[str, ...], path: Path) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise _invalid(path, f"'{key}' must be a string or a list of strings")


def load_module(module_file: Path) -> Module:
    """Parse one module definition file.

    Raises:
        MonolithError: PROJECT_INVALID if the file cannot be interpreted.
    """
    data = _read_yaml(module_file)
    name = data.get("name")
    if not name or not isinstance(name, str):
        raise _invalid(module_file, "missing 'name'")
    if "group" in data:
        name = f"{data['group']}/{name}"

    try:
        dependencies = tuple(
            ExternalDependency.from_value(dep) for dep in data.get("dependencies") or []
        )
    except ValueError as e:
        raise _invalid(module_file, str(e), e) from e

    return Module(
        name=condense_name(name),
        root=module_file.parent.resolve(),
        version=str(data.get("version", "")),
        source_paths=_paths(data, "source-paths", ("src",), module_file),
        test_paths=_paths(data, "test-paths", ("test",), module_file),
        resource_paths=_paths(data, "resource-paths", ("resources",), module_file),
        dependencies=dependencies,
    )


def load_monolith(root: Path, project: ProjectConfig | None = None) -> Monolith:
    """Load the metaproject at ``root`` and every module it lists.

    Directories matched by ``project-dirs`` that hold no module file are
    skipped with a warning.

    Raises:
        MonolithError: PROJECT_NOT_FOUND if there is no definition file,
            PROJECT_INVALID for malformed definitions or duplicate names.
    """
    project = project or ProjectConfig()
    root = root.resolve()
    definition = root / project.definition
    if not definition.exists():
        raise MonolithError(
            code=ErrorCode.PROJECT_NOT_FOUND,
            context={"path": str(definition)},
        )

    data = _read_yaml(definition)
    patterns = data.get("project-dirs") or []
    if not isinstance(patterns, list):
        raise _invalid(definition, "'project-dirs' must be a list")

    modules: dict[str, Module] = {}
    for pattern in patterns:
        matches = sorted(p for p in root.glob(str(pattern)) if p.is_dir())
        if not matches:
            logger.warning("project-dirs entry '%s' matched no directories", pattern)
        for directory in matches:
            module_file = directory / project.module_file
            if not module_file.is_file():
                logger.warning("Skipping %s: no %s", directory, project.module_file)
                continue
            module = load_module(module_file)
            if module.name in modules:
                raise _invalid(
                    module_file,
                    f"module '{module.name}' is already defined at {modules[module.name].root}",
                )
            modules[module.name] = module
            logger.debug("Loaded module %s from %s", module.name, directory)

    name = str(data.get("name") or root.name)
    return Monolith(
        root=root,
        name=name,
        modules=tuple(modules[n] for n in sorted(modules)),
        definition=project.definition,
    )
