"""Pytest fixtures for Monolith tests."""

import logging
import os
from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

from monolith.project.graph import DependencyGraph
from monolith.project.loader import load_monolith
from monolith.project.models import Monolith

ModuleFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep user config and MONOLITH_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith("MONOLITH_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    yield


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo configure_logging calls made by a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler in handlers or type(handler).__module__.startswith("_pytest"):
            continue
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)


@pytest.fixture
def write_module(tmp_path: Path) -> ModuleFactory:
    """Create a module directory with a module.yaml and some files.

    Usage:
        write_module("libs/lib-a", "example/lib-a",
                     dependencies=[["example/lib-d", "0.1.0"]],
                     files={"src/a.clj": "(ns a)"})
    """

    def factory(
        rel: str,
        name: str,
        dependencies: list | None = None,
        files: dict[str, str] | None = None,
        **extra: object,
    ) -> Path:
        directory = tmp_path / rel
        directory.mkdir(parents=True, exist_ok=True)
        definition = {"name": name, "version": "0.1.0", **extra}
        if dependencies:
            definition["dependencies"] = dependencies
        (directory / "module.yaml").write_text(yaml.safe_dump(definition))
        for path, content in (files or {}).items():
            target = directory / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return directory

    return factory


@pytest.fixture
def monorepo(tmp_path: Path, write_module: ModuleFactory) -> Path:
    """A diamond-shaped monolith.

    app-c depends on lib-a and lib-b, which both depend on lib-d.
    """
    (tmp_path / "monolith.yaml").write_text(
        yaml.safe_dump({"name": "example/all", "project-dirs": ["apps/*", "libs/*"]})
    )
    write_module(
        "libs/lib-d",
        "example/lib-d",
        dependencies=[["org.clojure/clojure", "1.9.0"]],
        files={"src/example/d.clj": "(ns example.d)", "test/example/d_test.clj": "(ns example.d-test)"},
    )
    write_module(
        "libs/lib-a",
        "example/lib-a",
        dependencies=[["org.clojure/clojure", "1.9.0"], ["example/lib-d", "0.1.0"]],
        files={"src/example/a.clj": "(ns example.a)", "resources/a.edn": "{:a 1}"},
    )
    write_module(
        "libs/lib-b",
        "example/lib-b",
        dependencies=[["example/lib-d", "0.1.0"]],
        files={"src/example/b.clj": "(ns example.b)"},
    )
    write_module(
        "apps/app-c",
        "example/app-c",
        dependencies=[
            ["org.clojure/clojure", "1.9.0"],
            ["example/lib-a", "0.1.0"],
            ["example/lib-b", "0.1.0"],
        ],
        files={"src/example/c.clj": "(ns example.c)", "test/example/c_test.clj": "(ns example.c-test)"},
    )
    return tmp_path


@pytest.fixture
def monolith(monorepo: Path) -> Monolith:
    """The loaded diamond monolith."""
    return load_monolith(monorepo)


@pytest.fixture
def graph(monolith: Monolith) -> DependencyGraph:
    """Dependency graph of the diamond monolith."""
    return DependencyGraph.from_modules(monolith.modules)
