"""Persistent fingerprint storage.

The fingerprint file lives at the monolith root and maps
marker → module → fingerprint record::

    {
      "version": 1,
      "markers": {
        "build": {
          "example/lib-a": {
            "deps": "sha1:...",
            "final": "sha1:...",
            "resources": "sha1:...",
            "sources": "sha1:...",
            "tests": "sha1:...",
            "timestamp": 1760745600000,
            "upstream": "sha1:..."
          }
        }
      }
    }

Keys are sorted and the document is indented so the file diffs cleanly.
A missing file is an empty store. A file that cannot be fully decoded is an
error for the whole store; there is no partial load.

Concurrency: ``update`` serializes read-modify-write cycles with a
per-path thread lock inside one process and an flock on a sibling
``.lock`` file across processes.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from monolith.foundation.errors import ErrorCode, MonolithError, io_error, store_corrupt
from monolith.fingerprint.fingerprinter import FingerprintRecord

logger = logging.getLogger(__name__)

StoreState = dict[str, dict[str, FingerprintRecord]]
"""marker name → module name → record."""

DEFAULT_STORE_FILE = ".monolith-fingerprints.json"

# One lock per store file, shared by every FingerprintStore in the process
_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _locks_guard:
        return _locks.setdefault(path, threading.Lock())


class FingerprintStore:
    """Reads and writes the fingerprint file of one monolith.

    Example:
        >>> store = FingerprintStore(Path("/repo"))
        >>> state = store.read()
        >>> store.update(lambda s: {**s, "build": {}})
    """

    FORMAT_VERSION = 1

    def __init__(self, root: Path, filename: str = DEFAULT_STORE_FILE) -> None:
        self.path = (root / filename).absolute()
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._lock = _lock_for(self.path)

    def read(self) -> StoreState:
        """Load the whole store.

        Returns:
            The stored state, or an empty state if the file does not exist.

        Raises:
            MonolithError: STORE_UNREADABLE if the file cannot be read,
                STORE_CORRUPT if it cannot be decoded.
        """
        if not self.path.exists():
            logger.debug("No fingerprint file at %s", self.path)
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise io_error(ErrorCode.STORE_UNREADABLE, self.path, e) from e
        return self.decode(text)

    def decode(self, text: str) -> StoreState:
        """Decode the textual store format."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise store_corrupt(self.path, f"invalid JSON: {e}", e) from e

        if not isinstance(data, dict):
            raise store_corrupt(self.path, "expected a JSON object")
        version = data.get("version")
        if version != self.FORMAT_VERSION:
            raise store_corrupt(self.path, f"unsupported format version {version!r}")
        markers = data.get("markers", {})
        if not isinstance(markers, dict):
            raise store_corrupt(self.path, "'markers' must be an object")

        state: StoreState = {}
        for marker, modules in markers.items():
            if not isinstance(modules, dict):
                raise store_corrupt(self.path, f"marker '{marker}' must be an object")
            state[marker] = {}
            for name, record in modules.items():
                state[marker][name] = self._decode_record(marker, name, record)
        return state

    def _decode_record(self, marker: str, name: str, record: Any) -> FingerprintRecord:
        where = f"{marker} → {name}"
        if not isinstance(record, dict):
            raise store_corrupt(self.path, f"{where}: record must be an object")
        try:
            return FingerprintRecord.from_dict(record)
        except KeyError as e:
            raise store_corrupt(self.path, f"{where}: missing field {e}", e) from e
        except (MonolithError, ValueError) as e:
            raise store_corrupt(self.path, f"{where}: {e}", e) from e

    def encode(self, state: StoreState) -> str:
        """Encode a state in the textual store format."""
        data = {
            "version": self.FORMAT_VERSION,
            "markers": {
                marker: {name: record.to_dict() for name, record in modules.items()}
                for marker, modules in state.items()
            },
        }
        return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    def write(self, state: StoreState) -> None:
        """Replace the store with ``state`` (temp file + rename).

        Raises:
            MonolithError: STORE_WRITE_FAILED on any filesystem error.
        """
        content = self.encode(state)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                suffix=".tmp",
                prefix=self.path.name + "_",
                dir=self.path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_path, self.path)
            except Exception:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise io_error(ErrorCode.STORE_WRITE_FAILED, self.path, e) from e

        logger.debug("Wrote %d markers to %s", len(state), self.path)

    def update(self, fn: Callable[..., StoreState], *args: Any) -> StoreState:
        """Read, apply ``fn(state, *args)``, and write back, under the store lock.

        Returns:
            The state that was written.
        """
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd = os.open(str(self.lock_path), os.O_CREAT | os.O_RDWR)
            except OSError as e:
                raise io_error(ErrorCode.STORE_WRITE_FAILED, self.lock_path, e) from e
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
                state = fn(self.read(), *args)
                self.write(state)
                return state
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
                os.close(fd)
