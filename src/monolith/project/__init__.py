"""Monolith project model: modules, the internal dependency graph, loading and selection."""

from monolith.project.graph import DependencyGraph
from monolith.project.loader import load_module, load_monolith
from monolith.project.models import (
    ExternalDependency,
    Module,
    Monolith,
    artifact_name,
    condense_name,
)
from monolith.project.selection import resolve_name, select

__all__ = [
    "DependencyGraph",
    "ExternalDependency",
    "Module",
    "Monolith",
    "artifact_name",
    "condense_name",
    "load_module",
    "load_monolith",
    "resolve_name",
    "select",
]
