"""Tests for the structured error system."""

import pytest

from monolith.foundation.errors import (
    ERROR_MESSAGES,
    CyclicDependencyError,
    ErrorCode,
    MonolithError,
    config_error,
    io_error,
    module_not_found,
    store_corrupt,
)


class TestErrorCode:
    """Tests for ErrorCode."""

    @pytest.mark.parametrize(
        ("code", "category"),
        [
            (ErrorCode.GRAPH_CYCLE, "graph"),
            (ErrorCode.STORE_CORRUPT, "encoding"),
            (ErrorCode.CONFIG_INVALID, "config"),
            (ErrorCode.STORE_WRITE_FAILED, "io"),
        ],
    )
    def test_category(self, code: ErrorCode, category: str) -> None:
        assert code.category == category

    def test_every_code_has_a_message(self) -> None:
        assert set(ERROR_MESSAGES) == set(ErrorCode)

    def test_recoverable(self) -> None:
        assert ErrorCode.FILE_UNREADABLE.is_recoverable
        assert not ErrorCode.STORE_CORRUPT.is_recoverable


class TestMonolithError:
    """Tests for MonolithError."""

    def test_message_and_id(self) -> None:
        error = MonolithError(code=ErrorCode.MODULE_NOT_FOUND, context={"module": "lib-z"})

        assert error.error_id == "MN-1002"
        assert str(error) == "[MN-1002] Module 'lib-z' not found in the monolith."

    def test_missing_context_keeps_template(self) -> None:
        """A message with missing context falls back to the raw template."""
        error = MonolithError(code=ErrorCode.FILE_UNREADABLE)

        assert error.message == ERROR_MESSAGES[ErrorCode.FILE_UNREADABLE]

    def test_to_dict(self) -> None:
        cause = OSError("disk on fire")
        error = io_error(ErrorCode.STORE_WRITE_FAILED, "/repo/.monolith-fingerprints.json", cause)

        data = error.to_dict()

        assert data["error_id"] == "MN-7003"
        assert data["category"] == "io"
        assert data["context"]["detail"] == "disk on fire"
        assert error.cause is cause

    def test_hints_are_formatted(self) -> None:
        error = module_not_found("lib-z", "repo.yaml")

        assert any("repo.yaml" in hint for hint in error.recovery_hints)

    def test_cyclic_dependency_error(self) -> None:
        error = CyclicDependencyError(["a", "b", "c"])

        assert isinstance(error, MonolithError)
        assert error.code == ErrorCode.GRAPH_CYCLE
        assert error.cycle == ["a", "b", "c"]
        assert error.message == "Circular dependency detected: a → b → c → a"

    def test_factories(self) -> None:
        assert store_corrupt("/x", "bad").code == ErrorCode.STORE_CORRUPT
        assert config_error("fingerprint.workers", "bad").context["key"] == "fingerprint.workers"
