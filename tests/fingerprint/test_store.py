"""Tests for the fingerprint file."""

import json
from pathlib import Path

import pytest

from monolith.foundation.errors import ErrorCode, MonolithError
from monolith.fingerprint.digest import hash_bytes
from monolith.fingerprint.fingerprinter import FingerprintRecord
from monolith.fingerprint.store import DEFAULT_STORE_FILE, FingerprintStore


def _record(seed: bytes, timestamp: int = 1760745600000) -> FingerprintRecord:
    return FingerprintRecord.assemble(
        sources=hash_bytes(seed + b"src"),
        tests=hash_bytes(seed + b"test"),
        resources=hash_bytes(b""),
        deps=hash_bytes(seed + b"deps"),
        upstream=hash_bytes(b""),
        timestamp=timestamp,
    )


class TestFingerprintStore:
    """Tests for FingerprintStore read/write."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """A monolith that was never marked has an empty store."""
        store = FingerprintStore(tmp_path)

        assert store.read() == {}
        assert not store.path.exists()

    def test_round_trip(self, tmp_path: Path) -> None:
        """Several markers and modules survive a write/read cycle."""
        store = FingerprintStore(tmp_path)
        state = {
            "build": {"example/lib-a": _record(b"a"), "example/lib-b": _record(b"b")},
            "deploy": {"example/lib-a": _record(b"a2")},
        }

        store.write(state)
        loaded = FingerprintStore(tmp_path).read()

        assert loaded == state
        assert loaded["build"]["example/lib-a"].timestamp == 1760745600000

    def test_file_is_stable_json(self, tmp_path: Path) -> None:
        """The file is sorted, indented JSON ending with a newline."""
        store = FingerprintStore(tmp_path)
        store.write({"build": {"example/lib-a": _record(b"a")}})

        text = store.path.read_text()
        data = json.loads(text)

        assert store.path.name == DEFAULT_STORE_FILE
        assert text.endswith("}\n")
        assert data["version"] == 1
        assert data["markers"]["build"]["example/lib-a"]["final"].startswith("sha1:")
        assert text == store.encode(store.read())

    def test_write_leaves_no_temp_files(self, tmp_path: Path) -> None:
        """Atomic writes clean up after themselves."""
        store = FingerprintStore(tmp_path)
        store.write({"build": {}})
        store.write({"build": {"example/lib-a": _record(b"a")}})

        assert [p.name for p in tmp_path.iterdir()] == [DEFAULT_STORE_FILE]

    def test_custom_filename(self, tmp_path: Path) -> None:
        """The store file name is configurable."""
        store = FingerprintStore(tmp_path, "fingerprints.json")
        store.write({})

        assert (tmp_path / "fingerprints.json").exists()

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            "[]",
            '{"version": 99, "markers": {}}',
            '{"version": 1, "markers": []}',
            '{"version": 1, "markers": {"build": []}}',
            '{"version": 1, "markers": {"build": {"example/lib-a": "sha1:00"}}}',
        ],
    )
    def test_malformed_file_is_corrupt(self, tmp_path: Path, content: str) -> None:
        """Anything that cannot be fully decoded is STORE_CORRUPT."""
        store = FingerprintStore(tmp_path)
        store.path.write_text(content)

        with pytest.raises(MonolithError) as exc_info:
            store.read()

        assert exc_info.value.code == ErrorCode.STORE_CORRUPT

    def test_bad_digest_is_corrupt(self, tmp_path: Path) -> None:
        """A record with an undecodable digest names the marker and module."""
        store = FingerprintStore(tmp_path)
        store.write({"build": {"example/lib-a": _record(b"a")}})
        data = json.loads(store.path.read_text())
        data["markers"]["build"]["example/lib-a"]["sources"] = "sha1:nothex"
        store.path.write_text(json.dumps(data))

        with pytest.raises(MonolithError) as exc_info:
            store.read()

        assert exc_info.value.code == ErrorCode.STORE_CORRUPT
        assert "build → example/lib-a" in exc_info.value.message

    def test_missing_field_is_corrupt(self, tmp_path: Path) -> None:
        """A record missing a digest is STORE_CORRUPT."""
        store = FingerprintStore(tmp_path)
        store.write({"build": {"example/lib-a": _record(b"a")}})
        data = json.loads(store.path.read_text())
        del data["markers"]["build"]["example/lib-a"]["deps"]
        store.path.write_text(json.dumps(data))

        with pytest.raises(MonolithError) as exc_info:
            store.read()

        assert exc_info.value.code == ErrorCode.STORE_CORRUPT
        assert "deps" in exc_info.value.message


class TestStoreUpdate:
    """Tests for FingerprintStore.update."""

    def test_update_merges_into_current_file(self, tmp_path: Path) -> None:
        """update reads the file at call time, so earlier writes are kept."""
        store = FingerprintStore(tmp_path)
        store.write({"build": {"example/lib-a": _record(b"a")}})

        def add(state, marker, name, record):
            state.setdefault(marker, {})[name] = record
            return state

        result = store.update(add, "build", "example/lib-b", _record(b"b"))

        assert set(result["build"]) == {"example/lib-a", "example/lib-b"}
        assert store.read() == result

    def test_update_takes_file_lock(self, tmp_path: Path) -> None:
        """update locks a sibling .lock file for other processes."""
        store = FingerprintStore(tmp_path)

        store.update(lambda state: state)

        assert store.lock_path == tmp_path / (DEFAULT_STORE_FILE + ".lock")
        assert store.lock_path.exists()
        assert store.read() == {}

    def test_stores_for_same_file_share_a_lock(self, tmp_path: Path) -> None:
        """Two store objects on one file serialize their updates."""
        first = FingerprintStore(tmp_path)
        second = FingerprintStore(tmp_path)

        assert first._lock is second._lock
