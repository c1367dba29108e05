"""Process execution with output capture.

Provides:
- Spawning an external command and capturing its outcome
- Lossy UTF-8 decoding of stdout/stderr
- Dry-run mode support for mutating commands
- Shell invocation for redirection-based bulk I/O
"""

import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional

from iptctl.core.context import ExecutionContext
from iptctl.core.exceptions import SpawnError


# Return code reported when the OS gives none (killed by a signal)
UNKNOWN_RETURN_CODE = -1


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command execution."""
    command: list[str]
    return_code: int
    stdout: str
    stderr: str
    signal: Optional[int] = None

    @property
    def success(self) -> bool:
        """Check if command succeeded."""
        return self.return_code == 0

    @property
    def display(self) -> str:
        return shlex.join(self.command)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class CommandExecutor:
    """Runs external commands and captures their output.

    Features:
    - Dry-run mode shows mutating commands instead of running them
    - Debug logging of every command line
    - SpawnError when the process cannot be started
    """

    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx

    def run(
        self,
        command: list[str],
        *,
        mutating: bool = False,
        description: Optional[str] = None,
    ) -> CommandResult:
        """Execute a command and capture its outcome.

        Non-zero exits are returned, not raised; classification is the
        caller's job.

        Args:
            command: Command as list of strings
            mutating: Command changes firewall state (skipped in dry-run)
            description: Human-readable description for logging

        Returns:
            CommandResult with decoded output

        Raises:
            SpawnError: If the process cannot be started
        """
        if description:
            self.ctx.console.step(description)

        cmd_display = shlex.join(command)
        self.ctx.console.debug(f"Running: {cmd_display}")

        if mutating and self.ctx.dry_run:
            self.ctx.console.dry_run_msg(f"Run: {cmd_display}")
            return CommandResult(
                command=command,
                return_code=0,
                stdout="",
                stderr="",
            )

        try:
            proc = subprocess.run(command, capture_output=True)
        except OSError as e:
            raise SpawnError(
                f"Failed to start {command[0]}: {e.strerror or e}",
                command=cmd_display,
                hint=f"Check that {command[0]} is installed and executable",
            ) from e

        signal = None
        return_code = proc.returncode
        if return_code < 0:
            signal = -return_code
            return_code = UNKNOWN_RETURN_CODE

        result = CommandResult(
            command=command,
            return_code=return_code,
            stdout=_decode(proc.stdout),
            stderr=_decode(proc.stderr),
            signal=signal,
        )
        if not result.success:
            self.ctx.console.debug(
                f"Exit code {result.return_code}: {result.stderr.strip()}"
            )
        return result

    def run_shell(
        self,
        script: str,
        *,
        mutating: bool = False,
        description: Optional[str] = None,
    ) -> CommandResult:
        """Execute a shell snippet via the configured shell (`sh -c`).

        Args:
            script: Shell command line, already quoted by the caller
            mutating: Command changes firewall state (skipped in dry-run)
            description: Human-readable description for logging

        Returns:
            CommandResult of the shell process
        """
        shell = self.ctx.config.tool.shell
        return self.run(
            [shell, "-c", script],
            mutating=mutating,
            description=description,
        )
