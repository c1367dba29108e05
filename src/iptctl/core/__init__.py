"""Core framework components for iptctl."""

from iptctl.core.exceptions import (
    IptctlError,
    ConfigurationError,
    ExecutionError,
    SpawnError,
    NonZeroExitError,
    PrerequisiteError,
    UnsupportedPlatformError,
    InvalidVersionFormatError,
    LockError,
    LockTimeoutError,
    DuplicateRuleError,
)

from iptctl.core.context import ExecutionContext, create_context
from iptctl.core.output import console, Console, Verbosity
from iptctl.core.config import AppConfig, IptctlConfig
from iptctl.core.executor import CommandExecutor, CommandResult

__all__ = [
    # Exceptions
    "IptctlError",
    "ConfigurationError",
    "ExecutionError",
    "SpawnError",
    "NonZeroExitError",
    "PrerequisiteError",
    "UnsupportedPlatformError",
    "InvalidVersionFormatError",
    "LockError",
    "LockTimeoutError",
    "DuplicateRuleError",
    # Context
    "ExecutionContext",
    "create_context",
    # Output
    "console",
    "Console",
    "Verbosity",
    # Config
    "AppConfig",
    "IptctlConfig",
    # Executor
    "CommandExecutor",
    "CommandResult",
]
