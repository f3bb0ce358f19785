"""Monolith - input fingerprints for multi-module repositories.

Tracks, per module, a content fingerprint covering its sources, tests,
resources, declared dependencies and the fingerprints of every internal
module it depends on, and reports which modules changed since a named
marker was last set.
"""

from monolith.fingerprint import (
    ChangeReason,
    Digest,
    FingerprintContext,
    FingerprintRecord,
    FingerprintStore,
    explain,
    is_changed,
    mark_all,
)
from monolith.foundation.errors import CyclicDependencyError, ErrorCode, MonolithError
from monolith.project import DependencyGraph, Module, Monolith, load_monolith

__version__ = "0.1.0"

__all__ = [
    "ChangeReason",
    "CyclicDependencyError",
    "DependencyGraph",
    "Digest",
    "ErrorCode",
    "FingerprintContext",
    "FingerprintRecord",
    "FingerprintStore",
    "Module",
    "Monolith",
    "MonolithError",
    "explain",
    "is_changed",
    "load_monolith",
    "mark_all",
]
