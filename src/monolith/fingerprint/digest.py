"""Digest values and order-independent aggregation.

A Digest is a self-describing hash value: the hashlib algorithm name plus
the raw digest bytes. Its canonical textual form is ``<algorithm>:<hex>``,
which is what gets persisted, compared and sorted.

The hash algorithm is always an explicit argument. Callers thread it down
from the topmost entry point (normally ``fingerprint.algorithm`` in config).

Example:
    >>> a = hash_bytes(b"hello")
    >>> a.encode()
    'sha1:aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d'
    >>> Digest.decode(a.encode()) == a
    True
    >>> aggregate([a]) == a
    True
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass

from monolith.foundation.errors import ErrorCode, MonolithError

DEFAULT_ALGORITHM = "sha1"


@dataclass(frozen=True, slots=True)
class Digest:
    """A content hash tagged with the algorithm that produced it.

    Attributes:
        algorithm: hashlib algorithm name (lowercase).
        value: Raw digest bytes.
    """

    algorithm: str
    value: bytes

    def encode(self) -> str:
        """Canonical textual form, ``<algorithm>:<lowercase hex>``."""
        return f"{self.algorithm}:{self.value.hex()}"

    @classmethod
    def decode(cls, text: str) -> Digest:
        """Parse the canonical textual form.

        Raises:
            MonolithError: DIGEST_INVALID if the text is not a well-formed digest.
        """
        if not isinstance(text, str):
            raise _invalid(text, "expected a string")
        algorithm, sep, hex_value = text.partition(":")
        if not sep or not algorithm or not hex_value:
            raise _invalid(text, "expected '<algorithm>:<hex>'")
        if algorithm != algorithm.lower():
            raise _invalid(text, "algorithm name must be lowercase")
        try:
            expected = hashlib.new(algorithm).digest_size
        except (ValueError, TypeError) as e:
            raise _invalid(text, f"unknown algorithm '{algorithm}'", e) from e
        try:
            value = bytes.fromhex(hex_value)
        except ValueError as e:
            raise _invalid(text, "digest is not hexadecimal", e) from e
        if len(value) != expected:
            raise _invalid(text, f"expected {expected} bytes for {algorithm}, got {len(value)}")
        if hex_value != value.hex():
            raise _invalid(text, "digest must be lowercase hex")
        return cls(algorithm=algorithm, value=value)

    def __lt__(self, other: Digest) -> bool:
        if not isinstance(other, Digest):
            return NotImplemented
        return self.encode() < other.encode()

    def __str__(self) -> str:
        return self.encode()


def _invalid(value: object, detail: str, cause: Exception | None = None) -> MonolithError:
    return MonolithError(
        code=ErrorCode.DIGEST_INVALID,
        context={"value": value, "detail": detail},
        cause=cause,
    )


def new_hasher(algorithm: str = DEFAULT_ALGORITHM):
    """Create a fresh hashlib object for ``algorithm``."""
    return hashlib.new(algorithm)


def finish(hasher) -> Digest:
    """Wrap a hashlib object's result as a Digest."""
    return Digest(algorithm=hasher.name.lower(), value=hasher.digest())


def hash_bytes(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> Digest:
    """Hash a byte string."""
    hasher = new_hasher(algorithm)
    hasher.update(data)
    return finish(hasher)


def empty_digest(algorithm: str = DEFAULT_ALGORITHM) -> Digest:
    """Sentinel for "nothing to hash": the digest of the empty byte string.

    Two modules that both lack a category (or both have no upstream
    modules) therefore compare equal on that category.
    """
    return hash_bytes(b"", algorithm)


def aggregate(digests: Iterable[Digest], algorithm: str = DEFAULT_ALGORITHM) -> Digest:
    """Combine digests into one, independently of order and duplicates.

    The input is treated as a set of distinct digests. A single distinct
    digest is returned unchanged; otherwise the sorted encodings are
    concatenated and hashed.

    Raises:
        ValueError: If no digests are given.
    """
    distinct = sorted(set(digests), key=Digest.encode)
    if not distinct:
        raise ValueError("aggregate() requires at least one digest")
    if len(distinct) == 1:
        return distinct[0]
    joined = "".join(d.encode() for d in distinct)
    return hash_bytes(joined.encode("ascii"), algorithm)
