"""Content hashing for module inputs.

Each file is hashed together with its absolute path, so identical bytes at
two locations produce different digests. Directories are expanded to every
file beneath them and the per-file digests are aggregated, which makes
enumeration order irrelevant.

An unreadable file is an error and is never skipped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from monolith.foundation.errors import ErrorCode, io_error
from monolith.fingerprint.digest import (
    DEFAULT_ALGORITHM,
    Digest,
    aggregate,
    empty_digest,
    finish,
    hash_bytes,
    new_hasher,
)
from monolith.project.models import ExternalDependency

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def list_files(path: Path) -> Iterator[Path]:
    """Yield every regular file at or beneath ``path``.

    A path that does not exist yields nothing. Symlinked directories are
    followed, and every path reaching a file is listed; a directory that
    links back to one of its own ancestors is not entered again.

    Raises:
        MonolithError: FILE_UNREADABLE if a directory cannot be listed.
    """
    if not path.exists():
        logger.debug("Skipping missing path %s", path)
        return
    yield from _walk(path, set())


def _walk(path: Path, ancestors: set[Path]) -> Iterator[Path]:
    if path.is_file():
        yield path
        return
    if not path.is_dir():
        return

    real = path.resolve()
    if real in ancestors:
        logger.debug("Not following symlink loop at %s", path)
        return

    try:
        children = sorted(path.iterdir())
    except OSError as e:
        raise io_error(ErrorCode.FILE_UNREADABLE, path, e) from e
    ancestors.add(real)
    try:
        for child in children:
            yield from _walk(child, ancestors)
    finally:
        ancestors.discard(real)


def hash_file(path: Path, algorithm: str = DEFAULT_ALGORITHM) -> Digest:
    """Hash a file's absolute path followed by its content.

    Raises:
        MonolithError: FILE_UNREADABLE if the file cannot be read.
    """
    hasher = new_hasher(algorithm)
    hasher.update(f"{path.absolute()}\n".encode())
    try:
        with open(path, "rb") as f:
            while chunk := f.read(_CHUNK_SIZE):
                hasher.update(chunk)
    except OSError as e:
        raise io_error(ErrorCode.FILE_UNREADABLE, path, e) from e
    return finish(hasher)


def hash_paths(
    paths: Iterable[Path],
    algorithm: str = DEFAULT_ALGORITHM,
    workers: int = 1,
) -> Digest:
    """Hash every file under the given path roots into one digest.

    Args:
        paths: Absolute path roots (files or directories).
        algorithm: hashlib algorithm name.
        workers: Threads used to hash files; 1 hashes sequentially.

    Returns:
        Aggregate digest, or the empty sentinel when there are no files.
    """
    files = [f for root in paths for f in list_files(root)]
    if not files:
        return empty_digest(algorithm)

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            digests = list(executor.map(lambda f: hash_file(f, algorithm), files))
    else:
        digests = [hash_file(f, algorithm) for f in files]

    logger.debug("Hashed %d files under %s", len(files), [str(p) for p in paths])
    return aggregate(digests, algorithm)


def hash_dependencies(
    dependencies: Iterable[ExternalDependency],
    algorithm: str = DEFAULT_ALGORITHM,
) -> Digest:
    """Hash a declared dependency list, ignoring declaration order."""
    canonical = sorted(dep.canonical() for dep in dependencies)
    return hash_bytes(json.dumps(canonical).encode("utf-8"), algorithm)

