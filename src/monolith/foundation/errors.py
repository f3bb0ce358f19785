"""Monolith Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-friendly messages
- Recovery hints
- Context for debugging

Fingerprinting must be trustworthy, so computation errors are never
downgraded to "treat as changed": they propagate to the command and abort it.
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Graph/Project errors
        2xxx - Fingerprint encoding errors
        5xxx - Configuration errors
        7xxx - IO errors
    """

    # 1xxx - Graph/Project Errors
    GRAPH_CYCLE = 1001
    MODULE_NOT_FOUND = 1002
    PROJECT_INVALID = 1003
    PROJECT_NOT_FOUND = 1004

    # 2xxx - Fingerprint Encoding Errors
    STORE_CORRUPT = 2001
    DIGEST_INVALID = 2002

    # 5xxx - Configuration Errors
    CONFIG_INVALID = 5002

    # 7xxx - IO Errors
    FILE_UNREADABLE = 7001
    STORE_UNREADABLE = 7002
    STORE_WRITE_FAILED = 7003

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            1: "graph",
            2: "encoding",
            5: "config",
            7: "io",
        }.get(prefix, "unknown")

    @property
    def is_recoverable(self) -> bool:
        """Whether this error type is typically recoverable."""
        non_recoverable = {
            ErrorCode.GRAPH_CYCLE,
            ErrorCode.STORE_CORRUPT,
            ErrorCode.DIGEST_INVALID,
            ErrorCode.CONFIG_INVALID,
        }
        return self not in non_recoverable


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Graph errors
    ErrorCode.GRAPH_CYCLE: "Circular dependency detected: {chain}",
    ErrorCode.MODULE_NOT_FOUND: "Module '{module}' not found in the monolith.",
    ErrorCode.PROJECT_INVALID: "Invalid module definition at '{path}': {detail}",
    ErrorCode.PROJECT_NOT_FOUND: "No monolith definition found at '{path}'.",

    # Encoding errors
    ErrorCode.STORE_CORRUPT: "Fingerprint file '{path}' is corrupt: {detail}",
    ErrorCode.DIGEST_INVALID: "Invalid digest '{value}': {detail}",

    # Config errors
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",

    # IO errors
    ErrorCode.FILE_UNREADABLE: "Cannot read '{path}': {detail}",
    ErrorCode.STORE_UNREADABLE: "Cannot read fingerprint file '{path}': {detail}",
    ErrorCode.STORE_WRITE_FAILED: "Failed to write fingerprint file '{path}': {detail}",
}


# Recovery hints
RECOVERY_HINTS: dict[ErrorCode, list[str]] = {
    ErrorCode.GRAPH_CYCLE: [
        "Remove one of the internal dependencies in the chain",
        "Run 'monolith fingerprint info --debug' to see which modules were being hashed",
    ],
    ErrorCode.MODULE_NOT_FOUND: [
        "Check the module name, or use the full group/artifact form",
        "Make sure the module directory is listed under project-dirs in {definition}",
    ],
    ErrorCode.STORE_CORRUPT: [
        "Restore the fingerprint file from version control",
        "Delete the fingerprint file and re-run 'monolith fingerprint mark'",
    ],
    ErrorCode.FILE_UNREADABLE: [
        "Check the file permissions for {path}",
    ],
    ErrorCode.CONFIG_INVALID: [
        "Fix the value in .monolith/config.yaml",
        "Unset the MONOLITH_* environment variable overriding it",
    ],
}


class MonolithError(Exception):
    """Base error type for all Monolith errors.

    Provides structured error information for:
    - Programmatic error handling (code)
    - User-friendly display (message)
    - Recovery suggestions (recovery_hints)
    - Debugging (context, cause)

    Example:
        >>> err = MonolithError(
        ...     code=ErrorCode.MODULE_NOT_FOUND,
        ...     context={"module": "example/lib-z"},
        ... )
        >>> print(err)
        [MN-1002] Module 'example/lib-z' not found in the monolith.
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            return template

    @property
    def recovery_hints(self) -> list[str]:
        """Get recovery suggestions for this error."""
        formatted = []
        for hint in RECOVERY_HINTS.get(self.code, []):
            try:
                formatted.append(hint.format(**self.context))
            except KeyError:
                formatted.append(hint)
        return formatted

    @property
    def is_recoverable(self) -> bool:
        """Whether this error is typically recoverable."""
        return self.code.is_recoverable

    @property
    def category(self) -> str:
        """Get the error category."""
        return self.code.category

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'MN-1001')."""
        return f"MN-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"MonolithError(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging/JSON output."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category,
            "message": self.message,
            "recoverable": self.is_recoverable,
            "recovery_hints": self.recovery_hints,
            "context": self.context,
        }


class CyclicDependencyError(MonolithError):
    """Raised when internal module dependencies form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        chain = " → ".join([*cycle, cycle[0]])
        super().__init__(code=ErrorCode.GRAPH_CYCLE, context={"chain": chain})


# Convenience factory functions

def io_error(
    code: ErrorCode,
    path: object,
    cause: Exception | None = None,
) -> MonolithError:
    """Create an IO error naming the offending path."""
    return MonolithError(
        code=code,
        context={"path": str(path), "detail": str(cause) if cause else ""},
        cause=cause,
    )


def store_corrupt(path: object, detail: str, cause: Exception | None = None) -> MonolithError:
    """Create a STORE_CORRUPT error."""
    return MonolithError(
        code=ErrorCode.STORE_CORRUPT,
        context={"path": str(path), "detail": detail},
        cause=cause,
    )


def module_not_found(module: str, definition: str = "monolith.yaml") -> MonolithError:
    """Create a MODULE_NOT_FOUND error."""
    return MonolithError(
        code=ErrorCode.MODULE_NOT_FOUND,
        context={"module": module, "definition": definition},
    )


def config_error(key: str, detail: str) -> MonolithError:
    """Create a CONFIG_INVALID error."""
    return MonolithError(
        code=ErrorCode.CONFIG_INVALID,
        context={"key": key, "detail": detail},
    )
