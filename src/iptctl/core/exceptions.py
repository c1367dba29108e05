"""Exceptions raised by iptctl.

Each class fixes the process exit code the CLI uses for it, so scripts
can tell a failed iptables call (5) from a busy lock (8) or a rule that
was already present (9). Predicates never raise for a non-zero tool
exit; they report False instead.
"""

from typing import Optional


class IptctlError(Exception):
    """Base exception for all iptctl errors.

    Attributes:
        message: Human-readable error description
        hint: Suggested action to resolve the error
        details: Additional context for debugging
        exit_code: Shell exit code (1-127)
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or []

    def __str__(self) -> str:
        return self.message


class ConfigurationError(IptctlError):
    """Configuration file or settings errors.

    Raised when:
    - Config file unreadable
    - Invalid YAML syntax
    - Invalid configuration values
    """
    exit_code = 2


class ExecutionError(IptctlError):
    """The firewall tool could not be run, or ran and failed."""
    exit_code = 5


class SpawnError(ExecutionError):
    """The external process could not be started at all.

    Raised when:
    - The binary is missing from PATH
    - The binary is not executable
    - The OS refuses to fork/exec
    """

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message, hint=hint, details=details)
        self.command = command


class NonZeroExitError(ExecutionError):
    """The firewall tool ran but reported failure.

    Carries the tool's exit code (-1 when the process was killed by a
    signal) and its decoded standard error.
    """

    def __init__(
        self,
        code: int,
        stderr: str,
        *,
        command: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        details = [f"Exit code: {code}"]
        if command:
            details.insert(0, f"Command: {command}")
        if stderr.strip():
            details.append(f"Error output: {stderr.strip()}")
        super().__init__(
            f"code: {code}, msg: {stderr.strip()}",
            hint=hint,
            details=details,
        )
        self.code = code
        self.stderr = stderr
        self.command = command


class PrerequisiteError(IptctlError):
    """Host prerequisites not met.

    Raised when:
    - Unsupported OS
    - Firewall tool reports an unusable version string
    """
    exit_code = 6


class UnsupportedPlatformError(PrerequisiteError):
    """iptables only exists on Linux."""


class InvalidVersionFormatError(PrerequisiteError):
    """The version probe output did not contain v<major>.<minor>.<patch>."""

    def __init__(self, output: str, *, command: Optional[str] = None) -> None:
        super().__init__(
            "invalid version number",
            hint="Check that the firewall tool is installed and working",
            details=[f"Version output: {output.strip()!r}"],
        )
        self.output = output
        self.command = command


class LockError(IptctlError):
    """The xtables fallback lock file could not be used.

    Raised when:
    - Lock file cannot be created or opened
    - flock fails for a reason other than contention
    """
    exit_code = 8

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message, hint=hint, details=details)
        self.path = path


class LockTimeoutError(LockError):
    """Exclusive lock not obtained within the retry budget."""

    def __init__(self, path: str, attempts: int) -> None:
        super().__init__(
            "get lock failed",
            path=path,
            hint="Another process is modifying the firewall; retry later",
            details=[f"Lock file: {path}", f"Attempts: {attempts}"],
        )
        self.attempts = attempts


class DuplicateRuleError(IptctlError):
    """append-unique found the rule already present."""
    exit_code = 9

    def __init__(
        self,
        *,
        table: str,
        chain: str,
        rule: str,
    ) -> None:
        super().__init__(
            "the rule exists in the table/chain",
            details=[f"Table: {table}", f"Chain: {chain}", f"Rule: {rule}"],
        )
        self.table = table
        self.chain = chain
        self.rule = rule
