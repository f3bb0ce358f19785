"""Foundation domain - config, errors, logging.

This domain has no dependencies on other monolith modules.
Everything else imports from here.
"""

from monolith.foundation.config import (
    FingerprintConfig,
    MonolithConfig,
    ProjectConfig,
    load_config,
)
from monolith.foundation.errors import (
    ERROR_MESSAGES,
    RECOVERY_HINTS,
    CyclicDependencyError,
    ErrorCode,
    MonolithError,
    config_error,
    io_error,
    module_not_found,
    store_corrupt,
)
from monolith.foundation.logging import configure_logging

__all__ = [
    # Config
    "FingerprintConfig",
    "MonolithConfig",
    "ProjectConfig",
    "load_config",
    # Errors
    "ERROR_MESSAGES",
    "RECOVERY_HINTS",
    "CyclicDependencyError",
    "ErrorCode",
    "MonolithError",
    "config_error",
    "io_error",
    "module_not_found",
    "store_corrupt",
    # Logging
    "configure_logging",
]
