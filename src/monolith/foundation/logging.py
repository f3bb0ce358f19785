"""Logging configuration for Monolith.

Provides centralized logging setup with sensible defaults:
- Default: WARNING level (quiet operation)
- --debug flag: DEBUG level with full context
- MONOLITH_DEBUG=true or MONOLITH_LOG_LEVEL=DEBUG env vars: Override for CI/scripting
- Config file: debug: true in .monolith/config.yaml (persistent)
- Persistent logs: Stored in .monolith/logs/ with session rotation

Usage:
    from monolith.foundation.logging import configure_logging
    configure_logging(debug=args.debug)

Priority for level resolution (highest to lowest):
    1. Explicit `level` parameter (programmatic override)
    2. MONOLITH_LOG_LEVEL env var (any level: DEBUG, INFO, WARNING, etc.)
    3. MONOLITH_DEBUG=true env var (simple boolean)
    4. `debug=True` parameter (--debug flag)
    5. Config file: debug: true
    6. WARNING (default)
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_DEBUG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
_DEFAULT_FORMAT = "%(name)s: %(message)s"

_MAX_LOG_SESSIONS = 10


def _get_log_directory(base: Path) -> Path:
    """Get or create the persistent log directory under ``base``."""
    log_dir = base / ".monolith" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _cleanup_old_logs(log_dir: Path, max_sessions: int = _MAX_LOG_SESSIONS) -> None:
    """Remove old session logs, keeping only the most recent N."""
    log_files = sorted(
        log_dir.glob("session_*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    for old_log in log_files[max_sessions:]:
        try:
            old_log.unlink()
        except OSError:
            pass  # another session may have removed it


def configure_logging(
    *,
    debug: bool = False,
    config_debug: bool = False,
    level: int | str | None = None,
    stream: object = None,
    persist: bool = False,
    log_root: Path | None = None,
) -> int:
    """Configure logging for the Monolith CLI.

    Args:
        debug: Enable DEBUG level with detailed format (--debug flag)
        config_debug: ``debug`` value read from the config file
        level: Override log level (int or string like "DEBUG", "INFO")
        stream: Output stream (default: stderr)
        persist: Store logs in .monolith/logs/ with session rotation
        log_root: Directory holding .monolith/ (default: cwd)

    Returns:
        The resolved console log level.
    """
    resolved_level: int
    if level is not None:
        resolved_level = _parse_level(level)
    elif env_level := os.environ.get("MONOLITH_LOG_LEVEL"):
        resolved_level = _parse_level(env_level)
    elif os.environ.get("MONOLITH_DEBUG", "").lower() in ("true", "1", "yes"):
        resolved_level = logging.DEBUG
    elif debug or config_debug:
        resolved_level = logging.DEBUG
    else:
        resolved_level = logging.WARNING

    console_format = _DEBUG_FORMAT if resolved_level <= logging.DEBUG else _DEFAULT_FORMAT

    root_logger = logging.getLogger()
    # File handler needs DEBUG records even when the console is quieter
    root_logger.setLevel(logging.DEBUG if persist else resolved_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(logging.Formatter(console_format))
    root_logger.addHandler(console_handler)

    if persist:
        try:
            log_dir = _get_log_directory(log_root or Path.cwd())
            _cleanup_old_logs(log_dir)

            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            file_handler = logging.FileHandler(
                log_dir / f"session_{timestamp}.log", mode="w", encoding="utf-8"
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
            root_logger.addHandler(file_handler)
        except OSError as e:
            # Non-fatal: log to stderr if file logging fails
            sys.stderr.write(f"Warning: Could not enable persistent logging: {e}\n")

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, debug=%s, persist=%s",
        logging.getLevelName(resolved_level),
        debug,
        persist,
    )
    return resolved_level


def _parse_level(level: int | str) -> int:
    """Parse log level from int or string."""
    if isinstance(level, int):
        return level
    numeric = getattr(logging, level.upper(), None)
    if isinstance(numeric, int):
        return numeric
    try:
        return int(level)
    except ValueError:
        return logging.WARNING
