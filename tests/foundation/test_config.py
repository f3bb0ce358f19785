"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from monolith.foundation.config import (
    FingerprintConfig,
    _apply_env_overrides,
    load_config,
)
from monolith.foundation.errors import ErrorCode, MonolithError


def _write_config(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = load_config(root=tmp_path, environ={})

        assert config.fingerprint == FingerprintConfig()
        assert config.fingerprint.algorithm == "sha1"
        assert config.project.definition == "monolith.yaml"
        assert config.debug is False

    def test_project_local_file(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path / ".monolith" / "config.yaml",
            {"fingerprint": {"algorithm": "sha256", "workers": 4}},
        )

        config = load_config(root=tmp_path, environ={})

        assert config.fingerprint.algorithm == "sha256"
        assert config.fingerprint.workers == 4
        assert config.fingerprint.store_file == ".monolith-fingerprints.json"

    def test_each_load_reads_current_file(self, tmp_path: Path) -> None:
        """Nothing is cached between calls."""
        config_file = tmp_path / ".monolith" / "config.yaml"
        _write_config(config_file, {"fingerprint": {"workers": 2}})
        first = load_config(root=tmp_path, environ={})
        _write_config(config_file, {"fingerprint": {"workers": 3}})

        second = load_config(root=tmp_path, environ={})

        assert (first.fingerprint.workers, second.fingerprint.workers) == (2, 3)

    def test_explicit_path_wins(self, tmp_path: Path) -> None:
        _write_config(tmp_path / ".monolith" / "config.yaml", {"debug": True})
        explicit = _write_config(tmp_path / "other.yaml", {"fingerprint": {"store_file": "fp.json"}})

        config = load_config(explicit, root=tmp_path, environ={})

        assert config.fingerprint.store_file == "fp.json"
        assert config.debug is False

    def test_user_global_file(self, tmp_path: Path) -> None:
        _write_config(Path.home() / ".monolith" / "config.yaml", {"debug": True})

        config = load_config(root=tmp_path / "repo", environ={})

        assert config.debug is True

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        _write_config(tmp_path / ".monolith" / "config.yaml", {"fingerprint": {"algorithm": "sha256"}})

        config = load_config(
            root=tmp_path,
            environ={"MONOLITH_FINGERPRINT_ALGORITHM": "md5", "MONOLITH_DEBUG": "true"},
        )

        assert config.fingerprint.algorithm == "md5"
        assert config.debug is True

    def test_unreadable_file_skipped(self, tmp_path: Path) -> None:
        (tmp_path / ".monolith").mkdir()
        (tmp_path / ".monolith" / "config.yaml").write_text("fingerprint: [unclosed\n")

        config = load_config(root=tmp_path, environ={})

        assert config.fingerprint.algorithm == "sha1"

    @pytest.mark.parametrize(
        ("data", "key"),
        [
            ({"fingerprint": {"algorithm": "nope"}}, "fingerprint.algorithm"),
            ({"fingerprint": {"algorithm": "shake_128"}}, "fingerprint.algorithm"),
            ({"fingerprint": {"workers": 0}}, "fingerprint.workers"),
            ({"fingerprint": {"colour": "blue"}}, "config"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, data: dict, key: str) -> None:
        _write_config(tmp_path / ".monolith" / "config.yaml", data)

        with pytest.raises(MonolithError) as exc_info:
            load_config(root=tmp_path, environ={})

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID
        assert exc_info.value.context["key"] == key


class TestEnvOverrides:
    """Tests for _apply_env_overrides."""

    def test_section_keys(self) -> None:
        result = _apply_env_overrides(
            {},
            {
                "MONOLITH_FINGERPRINT_WORKERS": "8",
                "MONOLITH_FINGERPRINT_STORE_FILE": "fp.json",
                "MONOLITH_PROJECT_MODULE_FILE": "project.yaml",
                "MONOLITH_PERSIST_LOGS": "false",
            },
        )

        assert result == {
            "fingerprint": {"workers": 8, "store_file": "fp.json"},
            "project": {"module_file": "project.yaml"},
            "persist_logs": False,
        }

    def test_unknown_keys_ignored(self) -> None:
        result = _apply_env_overrides({}, {"MONOLITH_FINGERPRINT_COLOUR": "blue", "OTHER": "x"})

        assert result == {}
