"""Lock-guarded invocation of the firewall tool.

Two strategies, fixed when the tool is probed:
- NATIVE_WAIT: pass ``--wait`` and let iptables serialize itself
- FILE_LOCK: hold the fallback FileLock around the process
"""

from typing import Optional

from iptctl.core.executor import CommandExecutor, CommandResult
from iptctl.services.lock import FileLock
from iptctl.services.version import LockStrategy, ToolHandle


WAIT_FLAG = "--wait"


class LockGuardedInvoker:
    """Runs the firewall tool with exclusivity appropriate to its version."""

    def __init__(
        self,
        tool: ToolHandle,
        executor: CommandExecutor,
        lock: Optional[FileLock] = None,
    ) -> None:
        """Initialize the invoker.

        Args:
            tool: Probed tool handle
            executor: Spawns the process
            lock: Fallback lock; built from config when omitted and needed
        """
        self.tool = tool
        self.executor = executor
        if lock is None and tool.lock_strategy is LockStrategy.FILE_LOCK:
            ctx = executor.ctx
            lock = FileLock.from_config(ctx.config.lock, console=ctx.console)
        self.lock = lock

    def invoke(self, args: list[str], *, mutating: bool = False) -> CommandResult:
        """Run ``<cmd> <args>`` once.

        The outcome is returned unclassified; a non-zero exit is not an
        error at this layer.

        Args:
            args: Argument vector, without the command name
            mutating: Command changes firewall state (skipped in dry-run)

        Raises:
            SpawnError: If the tool cannot be started
            LockTimeoutError: If the fallback lock stays busy
        """
        if self.tool.lock_strategy is LockStrategy.NATIVE_WAIT:
            return self.executor.run(
                [self.tool.cmd, *args, WAIT_FLAG],
                mutating=mutating,
            )

        command = [self.tool.cmd, *args]
        if mutating and self.executor.ctx.dry_run:
            # Nothing will be spawned
            return self.executor.run(command, mutating=True)

        with self.lock.acquire():
            return self.executor.run(command, mutating=mutating)
