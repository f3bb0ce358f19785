"""Module input fingerprinting.

Computes hierarchical content fingerprints over the module dependency graph,
persists them under named markers, and explains what changed since a marker
was last set.

Example:
    >>> ctx = FingerprintContext.create(monolith)
    >>> is_changed(ctx, "build", "example/app-a")
    True
    >>> mark_all(ctx, ["build"], ["example/app-a"])
    >>> explain(FingerprintContext.create(monolith), "build", "example/app-a")
    <ChangeReason.UP_TO_DATE: 'up-to-date'>
"""

from monolith.fingerprint.compare import (
    REPORT_ORDER,
    ChangeReason,
    FingerprintContext,
    explain,
    is_changed,
)
from monolith.fingerprint.digest import (
    DEFAULT_ALGORITHM,
    Digest,
    aggregate,
    empty_digest,
    hash_bytes,
)
from monolith.fingerprint.fingerprinter import (
    CONTENT_KINDS,
    FingerprintCache,
    FingerprintKind,
    FingerprintRecord,
    compute_fingerprint,
)
from monolith.fingerprint.hasher import hash_dependencies, hash_file, hash_paths, list_files
from monolith.fingerprint.markers import (
    MarkerReport,
    clear,
    mark_all,
    parse_markers,
    report,
    save,
)
from monolith.fingerprint.store import DEFAULT_STORE_FILE, FingerprintStore, StoreState

__all__ = [
    # Digests
    "DEFAULT_ALGORITHM",
    "Digest",
    "aggregate",
    "empty_digest",
    "hash_bytes",
    # Hashing
    "hash_dependencies",
    "hash_file",
    "hash_paths",
    "list_files",
    # Fingerprints
    "CONTENT_KINDS",
    "FingerprintCache",
    "FingerprintKind",
    "FingerprintRecord",
    "compute_fingerprint",
    # Store
    "DEFAULT_STORE_FILE",
    "FingerprintStore",
    "StoreState",
    # Comparison
    "REPORT_ORDER",
    "ChangeReason",
    "FingerprintContext",
    "explain",
    "is_changed",
    # Markers
    "MarkerReport",
    "clear",
    "mark_all",
    "parse_markers",
    "report",
    "save",
]
