"""Monolith configuration management.

Loads configuration from .monolith/config.yaml with sensible defaults.
All settings can be overridden via environment variables (MONOLITH_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. <root>/.monolith/config.yaml (project-local)
3. ~/.monolith/config.yaml (user-global)
4. Built-in defaults
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from monolith.foundation.errors import config_error

logger = logging.getLogger(__name__)


@dataclass
class FingerprintConfig:
    """Configuration for module fingerprinting."""

    algorithm: str = "sha1"
    """hashlib algorithm used for every digest computed in one run."""

    store_file: str = ".monolith-fingerprints.json"
    """Fingerprint file name, relative to the monolith root."""

    workers: int = 1
    """Threads used to hash the files of one category (1 = sequential)."""


@dataclass
class ProjectConfig:
    """Configuration for locating module definitions."""

    definition: str = "monolith.yaml"
    """Metaproject definition file at the monolith root."""

    module_file: str = "module.yaml"
    """Per-module definition file inside each module directory."""


@dataclass
class MonolithConfig:
    """Root configuration for Monolith."""

    fingerprint: FingerprintConfig = field(default_factory=FingerprintConfig)
    """Fingerprinting configuration."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    """Module discovery configuration."""

    debug: bool = False
    """Enable debug logging by default."""

    persist_logs: bool = False
    """Write session logs to .monolith/logs/."""


_SECTIONS: dict[str, set[str]] = {
    "fingerprint": {"algorithm", "store_file", "workers"},
    "project": {"definition", "module_file"},
}
_TOP_LEVEL_KEYS = {"debug", "persist_logs"}


def _deep_update(base: dict, updates: dict) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str) -> Any:
    """Coerce an environment string to bool/int/float where it looks like one."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env_overrides(config_dict: dict, environ: dict[str, str] | None = None) -> dict:
    """Apply environment variable overrides.

    Environment variables follow pattern: MONOLITH_SECTION_KEY

    Examples:
        MONOLITH_FINGERPRINT_ALGORITHM=sha256
        MONOLITH_FINGERPRINT_STORE_FILE=.fingerprints.json
        MONOLITH_DEBUG=true
    """
    prefix = "MONOLITH_"
    env = os.environ if environ is None else environ

    for key, value in env.items():
        if not key.startswith(prefix):
            continue
        path_str = key[len(prefix):].lower()

        if path_str in _TOP_LEVEL_KEYS:
            config_dict[path_str] = _coerce(value)
            continue

        for section, keys in _SECTIONS.items():
            if not path_str.startswith(section + "_"):
                continue
            name = path_str[len(section) + 1:]
            if name in keys:
                config_dict.setdefault(section, {})[name] = _coerce(value)
            break

    return config_dict


def _dict_to_config(data: dict) -> MonolithConfig:
    """Convert a dict to MonolithConfig, validating the values that matter."""
    try:
        fingerprint = FingerprintConfig(**data.get("fingerprint", {}))
        project = ProjectConfig(**data.get("project", {}))
    except TypeError as e:
        raise config_error("config", str(e)) from e

    fingerprint.algorithm = str(fingerprint.algorithm).lower()
    if fingerprint.algorithm not in hashlib.algorithms_available:
        raise config_error(
            "fingerprint.algorithm",
            f"unknown hash algorithm '{fingerprint.algorithm}'",
        )
    if fingerprint.algorithm.startswith("shake_"):
        raise config_error(
            "fingerprint.algorithm",
            "variable-length algorithms are not supported",
        )
    if not isinstance(fingerprint.workers, int) or fingerprint.workers < 1:
        raise config_error("fingerprint.workers", "must be a positive integer")

    return MonolithConfig(
        fingerprint=fingerprint,
        project=project,
        debug=bool(data.get("debug", False)),
        persist_logs=bool(data.get("persist_logs", False)),
    )


def load_config(
    path: str | Path | None = None,
    root: Path | None = None,
    environ: dict[str, str] | None = None,
) -> MonolithConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (MONOLITH_*)
    2. Explicit path if provided
    3. <root>/.monolith/config.yaml (project-local)
    4. ~/.monolith/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.
        root: Monolith root to search for the project-local file (default: cwd).
        environ: Environment mapping (default: os.environ).

    Returns:
        Merged MonolithConfig instance.

    Raises:
        MonolithError: CONFIG_INVALID if a merged value is unusable.
    """

    config_dict: dict[str, Any] = {
        "fingerprint": {
            "algorithm": "sha1",
            "store_file": ".monolith-fingerprints.json",
            "workers": 1,
        },
        "project": {
            "definition": "monolith.yaml",
            "module_file": "module.yaml",
        },
        "debug": False,
        "persist_logs": False,
    }

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        (root or Path.cwd()) / ".monolith" / "config.yaml",
        Path.home() / ".monolith" / "config.yaml",
    ])

    for config_path in config_paths:
        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Skipping unreadable config %s: %s", config_path, e)
                continue
            if not isinstance(file_config, dict):
                logger.warning("Skipping config %s: expected a mapping", config_path)
                continue
            _deep_update(config_dict, file_config)
            logger.debug("Loaded config from %s", config_path)
            break  # Use first found config

    config_dict = _apply_env_overrides(config_dict, environ)

    return _dict_to_config(config_dict)
